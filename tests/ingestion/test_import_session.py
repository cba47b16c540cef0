"""Tests for ImportSession: configuration, iteration and the three activities."""

import pytest

from datafile_ingestion.adapters import SequenceTabularSource
from datafile_ingestion.domain.types import ActivityType, DataField, LoadAction, SessionOptions
from datafile_ingestion.mapping.converters import UpperCaseConverter
from datafile_ingestion.services import ImportSession
from datafile_kernel.domain.problems import ProblemReport, Severity
from datafile_kernel.exceptions import LoaderNotInitialisedError
from tests.fixtures.models import Company, Person


class TestCreateAll:
    def test_builds_entity_from_row(self, make_session):
        s = make_session(Person, [["Ann", "30"]], activity=ActivityType.CREATE_ALL)
        s.add_fields("name", "age")
        s.advance()
        person = s.row_result()
        assert isinstance(person, Person)
        assert (person.name, person.age) == ("Ann", 30)
        assert len(s.report) == 0

    def test_each_row_is_a_new_entity(self, make_session):
        s = make_session(Person, [["Ann"], ["Bob"]], activity=ActivityType.CREATE_ALL)
        s.add_field("name")
        first, second = s.results()
        assert first is not second
        assert [first.name, second.name] == ["Ann", "Bob"]

    def test_entities_not_added_to_session(self, make_session, session):
        s = make_session(Person, [["Ann"]], activity=ActivityType.CREATE_ALL)
        s.add_field("name")
        (person,) = s.results()
        assert person not in session


class TestCreateFind:
    def test_missing_reference_created_once(self, make_session):
        s = make_session(Person, [["Acme"], ["Acme"]], create_missing_associations=True)
        s.add_field("company.name")
        first, second = s.results()
        assert isinstance(first.company, Company)
        assert first.company is second.company
        assert len(s.creation_cache) == 1

    def test_existing_reference_reused(self, make_session, session):
        acme = Company(name="Acme")
        session.add(acme)
        session.flush()
        s = make_session(Person, [["Ann", "Acme"], ["Bob", "Acme"]])
        s.add_fields("name", "company.name")
        first, second = s.results()
        assert first.company is acme
        assert second.company is acme
        assert len(s.creation_cache) == 0

    def test_missing_reference_without_creation_is_error(self, make_session):
        s = make_session(Person, [["Ann", "Acme"]])
        s.add_fields("name", "company.name")
        (person,) = s.results()
        assert person.name == "Ann"
        assert person.company is None
        (problem,) = s.report.errors
        assert problem.code == "REFERENCE_NOT_FOUND"
        assert problem.where == "Row 1, column 2."

    def test_compound_defaults_to_lookup(self, make_session):
        s = make_session(Person, [])
        assert s.add_field("company.name").load_action is LoadAction.LOOKUP_EQUALS
        assert s.add_field("name").load_action is LoadAction.SET_VALUE

    def test_create_all_compound_defaults_to_set(self, make_session):
        s = make_session(Person, [], activity=ActivityType.CREATE_ALL)
        assert s.add_field("company.name").load_action is LoadAction.SET_VALUE


class TestFind:
    @pytest.fixture
    def ann(self, session):
        person = Person(name="Ann", email="ann@acme.test")
        session.add_all([person, Person(name="Bob", email="bob@globex.test")])
        session.flush()
        return person

    def test_contains_lookup(self, make_session, ann):
        s = make_session(Person, [["acme"]], activity=ActivityType.FIND)
        s.add_field("email", load_action=LoadAction.LOOKUP_CONTAINS)
        assert s.results() == [ann]
        assert len(s.report) == 0

    def test_unmatched_row_is_none(self, make_session, ann):
        s = make_session(Person, [["initech"]], activity=ActivityType.FIND)
        s.add_field("email", load_action=LoadAction.LOOKUP_CONTAINS)
        assert s.results() == [None]


class TestRequiredAndEmpty:
    def test_required_empty_numeric(self, make_session):
        s = make_session(Person, [[""]], activity=ActivityType.CREATE_ALL)
        s.add_field("age", required=True)
        (person,) = s.results()
        assert person.age is None
        (problem,) = s.report
        assert problem.severity is Severity.WARNING
        assert problem.code == "VALUE_REQUIRED"
        assert problem.message == "A value is required for 'Age' but no value was found."

    def test_session_default_empty_as_zero(self, make_session):
        s = make_session(
            Person, [[""]], activity=ActivityType.CREATE_ALL, treat_empty_numeric_as_zero=True
        )
        s.add_field("age")
        assert s.results()[0].age == 0

    def test_field_setting_overrides_session_default(self, make_session):
        s = make_session(
            Person, [["", ""]], activity=ActivityType.CREATE_ALL, treat_empty_numeric_as_zero=True
        )
        s.add_field("age", treat_empty_numeric_as_zero=False)
        s.add_field("followers")
        (person,) = s.results()
        assert person.age is None
        assert person.followers == 0


class TestFields:
    def test_indices_follow_declaration_order(self, make_session):
        s = make_session(Person, [])
        fields = s.add_fields("name", "age", "email")
        assert [f.index for f in fields] == [0, 1, 2]
        assert s.fields == tuple(fields)

    def test_add_descriptor_takes_next_index(self, make_session):
        s = make_session(Person, [])
        s.add_field("name")
        descriptor = s.add_descriptor(DataField("age", index=7, required=True))
        assert descriptor.index == 1
        assert descriptor.required

    def test_offset_is_cumulative(self, make_session):
        s = make_session(Person, [])
        s.add_fields("name", "age")
        s.apply_field_offset(1)
        s.apply_field_offset(1)
        assert [f.index for f in s.fields] == [2, 3]

    def test_option_offset_applied_once(self, make_session):
        s = make_session(
            Person, [["x", "Ann"], ["y", "Bob"]], activity=ActivityType.CREATE_ALL, field_offset=1
        )
        s.add_field("name")
        assert [p.name for p in s.results()] == ["Ann", "Bob"]
        assert s.fields[0].index == 1

    def test_converter_applied(self, make_session):
        s = make_session(Person, [["ann"]], activity=ActivityType.CREATE_ALL)
        s.add_field("name", converter=UpperCaseConverter())
        assert s.results()[0].name == "ANN"


class TestIteration:
    def test_manual_loop(self, make_session):
        s = make_session(Person, [["Ann"], ["Bob"]], activity=ActivityType.CREATE_ALL)
        s.add_field("name")
        names = []
        while s.has_next():
            s.advance()
            names.append(s.row_result().name)
        assert names == ["Ann", "Bob"]
        assert s.rows_assembled == 2

    def test_header_rows_skipped(self, schema, persistence):
        source = SequenceTabularSource([["name"], ["Ann"]], start_row=1)
        s = ImportSession(schema, persistence, Person, source, activity=ActivityType.CREATE_ALL)
        s.add_field("name")
        assert [p.name for p in s.results()] == ["Ann"]

    def test_skip_empty_rows(self, make_session):
        s = make_session(Person, [["Ann"], ["", None], ["Bob"]], activity=ActivityType.CREATE_ALL)
        s.add_field("name")
        assert [p.name for p in s.results(skip_empty_rows=True)] == ["Ann", "Bob"]

    def test_report_accumulates_with_row_numbers(self, make_session):
        s = make_session(Person, [["old"], ["30"], ["young"]], activity=ActivityType.CREATE_ALL)
        s.add_field("age")
        s.results()
        assert [p.row for p in s.report] == [1, 3]
        assert s.report.for_row(3)[0].code == "INVALID_VALUE"

    def test_shared_report(self, schema, persistence):
        report = ProblemReport()
        source = SequenceTabularSource([["old"]])
        s = ImportSession(schema, persistence, Person, source, report=report, activity=ActivityType.CREATE_ALL)
        s.add_field("age")
        s.results()
        assert s.report is report
        assert len(report) == 1

    def test_results_logged(self, make_session, captured_logs):
        s = make_session(Person, [["Ann"]], activity=ActivityType.CREATE_ALL)
        s.add_field("name")
        s.results()
        (record,) = [r for r in captured_logs() if r["message"] == "session_results_collected"]
        assert record["rows"] == 1


class TestOptions:
    def test_overrides_replace_options(self, schema, persistence):
        base = SessionOptions(activity=ActivityType.FIND, field_offset=2)
        s = ImportSession(schema, persistence, options=base, create_missing_associations=True)
        assert s.activity is ActivityType.FIND
        assert s.options.create_missing_associations
        assert s.options.field_offset == 2

    def test_defaults(self, schema, persistence):
        s = ImportSession(schema, persistence)
        assert s.activity is ActivityType.CREATE_FIND
        assert not s.options.create_missing_associations
        assert not s.options.treat_empty_numeric_as_zero


class TestNotInitialised:
    def test_missing_entity_type(self, schema, persistence):
        s = ImportSession(schema, persistence, source=SequenceTabularSource([["Ann"]]))
        s.advance()
        with pytest.raises(LoaderNotInitialisedError) as exc_info:
            s.row_result()
        assert str(exc_info.value) == (
            "The loader has not been initialised correctly - "
            "check that you set the entity type for the loader."
        )

    def test_missing_source(self, schema, persistence):
        s = ImportSession(schema, persistence, Person)
        with pytest.raises(LoaderNotInitialisedError):
            s.has_next()

    def test_missing_persistence(self, schema):
        s = ImportSession(schema, None, Person, SequenceTabularSource([["Ann"]]))
        with pytest.raises(LoaderNotInitialisedError) as exc_info:
            s.results()
        assert exc_info.value.missing == "persistence"


class TestDiagnostics:
    def test_describe_location(self, make_session):
        s = make_session(Person, [["Ann", "30"], ["Bob", "41"]])
        s.advance()
        s.advance()
        assert s.describe_location() == "Row 2."
        assert s.describe_location(1) == "Row 2, column 2."

    def test_describe_row(self, make_session):
        s = make_session(Person, [["Ann", 30.0]])
        s.advance()
        assert s.describe_row() == "Row 1, (1,1) = Ann, (1,2) = 30"


class TestLifecycle:
    def test_close_clears_cache(self, make_session):
        with make_session(Person, [["Acme"]], create_missing_associations=True) as s:
            s.add_field("company.name")
            s.results()
            assert len(s.creation_cache) == 1
        assert len(s.creation_cache) == 0
