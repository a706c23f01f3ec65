"""Explicit result shapes for multi-table store queries.

Single-table lookups return the ORM row itself; joins return one of these so
conversion functions never deal with untyped tuples.
"""

from __future__ import annotations

from dataclasses import dataclass

from chii.persistence.tables import (
    CharacterSubjectTable,
    PersonTable,
    SubjectFieldTable,
    SubjectTable,
)


@dataclass(frozen=True)
class SubjectRow:
    """A subject joined with its fields row."""

    subject: SubjectTable
    fields: SubjectFieldTable

    @property
    def id(self) -> int:
        return self.subject.id


@dataclass(frozen=True)
class CastRow:
    """A cast entry: the person voicing/playing ``character_id`` in ``subject_id``."""

    character_id: int
    subject_id: int
    person: PersonTable


@dataclass(frozen=True)
class CastRelationRow:
    """A cast entry joined with the subject and the character's role in it."""

    character_id: int
    subject: SubjectTable
    fields: SubjectFieldTable
    relation: CharacterSubjectTable


@dataclass(frozen=True)
class CalendarRow:
    id: int
    weekday: int
    watchers: int


@dataclass(frozen=True)
class InterestAggregate:
    """Number of interest events for one id inside a trending window."""

    id: int
    total: int
