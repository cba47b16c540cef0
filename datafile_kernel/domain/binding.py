"""
Binding path parsing.

A binding is a dot-delimited attribute path, e.g. ``company.contact.name``.
BindingPath splits it once into an ordered tuple of segments and exposes the
first-segment / remainder split used by lookups.
"""

from __future__ import annotations

from dataclasses import dataclass

SEPARATOR = "."


@dataclass(frozen=True)
class BindingPath:
    """Immutable parsed binding path."""

    segments: tuple[str, ...]

    @classmethod
    def parse(cls, binding: str) -> "BindingPath":
        """Parse a dotted binding. Raises ValueError on empty segments."""
        if binding is None:
            raise ValueError("Binding must not be None")
        segments = tuple(s.strip() for s in binding.split(SEPARATOR))
        if not segments or any(not s for s in segments):
            raise ValueError(f"Malformed binding: {binding!r}")
        return cls(segments)

    @classmethod
    def of(cls, *parts: "str | BindingPath") -> "BindingPath":
        """Join bindings or segments into one compound path."""
        segments: list[str] = []
        for part in parts:
            if isinstance(part, BindingPath):
                segments.extend(part.segments)
            else:
                segments.extend(cls.parse(part).segments)
        return cls(tuple(segments))

    @property
    def is_compound(self) -> bool:
        return len(self.segments) > 1

    @property
    def first(self) -> str:
        """The segment naming the sub-entity to query or create."""
        return self.segments[0]

    @property
    def remainder(self) -> "BindingPath":
        """Attribute path within the sub-entity named by ``first``."""
        if not self.is_compound:
            return self
        return BindingPath(self.segments[1:])

    @property
    def first_level(self) -> "BindingPath":
        """
        Binding used to find the driving entity type.

        When the remainder is itself compound the path is cut after the second
        segment (``a.b.c.d`` -> ``a.b``); otherwise the whole binding is used.
        """
        if len(self.remainder.segments) > 1:
            return BindingPath(self.segments[:2])
        return self

    @property
    def parent(self) -> "BindingPath | None":
        if not self.is_compound:
            return None
        return BindingPath(self.segments[:-1])

    @property
    def last(self) -> str:
        return self.segments[-1]

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)

    def __len__(self) -> int:
        return len(self.segments)
