"""Tests for SqlAlchemyQuery / SqlAlchemyPersistence against SQLite."""

import pytest

from datafile_kernel.exceptions import BindingPathError, InvalidBindingError
from tests.fixtures.models import Company, Contact, Person


@pytest.fixture
def seeded(session):
    acme = Company(name="Acme", contact=Contact(name="Bea", email="bea@acme.test"))
    globex = Company(name="Globex")
    session.add_all([
        acme,
        globex,
        Person(name="Ann", email="ann@acme.test", company=acme),
        Person(name="Bob", email="bob@globex.test", company=globex),
    ])
    session.flush()
    return {"acme": acme, "globex": globex}


class TestQueryFilters:
    def test_empty_until_filtered(self, persistence):
        query = persistence.new_query(Person)
        assert query.is_empty
        query.add_equals("name", "Ann")
        assert not query.is_empty

    def test_equals(self, persistence, seeded):
        query = persistence.new_query(Company)
        query.add_equals("name", "Acme")
        assert query.single_result() is seeded["acme"]

    def test_like(self, persistence, seeded):
        query = persistence.new_query(Person)
        query.add_like("email", "%globex%")
        assert [p.name for p in query.results()] == ["Bob"]

    def test_no_match(self, persistence, seeded):
        query = persistence.new_query(Company)
        query.add_equals("name", "Initech")
        assert query.single_result() is None

    def test_to_one_path_becomes_has(self, persistence, seeded):
        query = persistence.new_query(Company)
        query.add_equals("contact.name", "Bea")
        assert query.single_result() is seeded["acme"]

    def test_nested_path_from_root(self, persistence, seeded):
        query = persistence.new_query(Person)
        query.add_equals("company.contact.name", "Bea")
        assert [p.name for p in query.results()] == ["Ann"]

    def test_invalid_binding(self, persistence):
        query = persistence.new_query(Person)
        with pytest.raises(InvalidBindingError):
            query.add_equals("shoe_size", 42)

    def test_relation_terminal_cannot_be_compared(self, persistence):
        query = persistence.new_query(Person)
        with pytest.raises(BindingPathError):
            query.add_equals("company", "Acme")
        assert query.is_empty

    def test_str_shows_filters(self, persistence):
        query = persistence.new_query(Person)
        query.add_like("email", "%acme%")
        assert str(query) == "Person WHERE email LIKE '%acme%'"
        assert query.filters == (("email", "LIKE", "%acme%"),)


class TestPersistence:
    def test_new_instance_is_not_added_to_session(self, persistence, session):
        person = persistence.new_instance(Person)
        assert isinstance(person, Person)
        assert person not in session

    def test_populate_creates_intermediates(self, persistence):
        person = persistence.new_instance(Person)
        persistence.populate(person, "company.name", "Initech")
        assert persistence.get(person, "company.name") == "Initech"

    def test_set_and_get(self, persistence):
        person = Person()
        persistence.set(person, "name", "Cy")
        assert persistence.get(person, "name") == "Cy"
