"""Relational store interface and its SQLAlchemy implementation.

The cache core only talks to the database through ``Store``. ``SqlStore``
opens one short-lived session per call and never holds a transaction open
across calls; driver errors surface as ``StoreError``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import and_, case, desc, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chii.core.types import SubjectSort, SubjectType
from chii.errors import StoreError
from chii.persistence.rows import (
    CalendarRow,
    CastRelationRow,
    CastRow,
    InterestAggregate,
    SubjectRow,
)
from chii.persistence.tables import (
    BlogEntryTable,
    CharacterCastTable,
    CharacterSubjectTable,
    CharacterTable,
    EpisodeTable,
    FriendTable,
    GroupTable,
    GroupTopicTable,
    IndexTable,
    PersonTable,
    SubjectFieldTable,
    SubjectInterestTable,
    SubjectPostTable,
    SubjectTable,
    SubjectTopicTable,
    TagIndexTable,
    TagListTable,
    UserTable,
)

logger = logging.getLogger(__name__)

# Platforms shown on the airing calendar: TV and WEB
CALENDAR_PLATFORMS = (1, 5)


class EntityKind(str, Enum):
    USER = "user"
    SUBJECT = "subject"
    EPISODE = "episode"
    SUBJECT_TOPIC = "subject_topic"
    CHARACTER = "character"
    PERSON = "person"
    GROUP = "group"
    GROUP_TOPIC = "group_topic"
    BLOG_ENTRY = "blog_entry"
    INDEX = "index"


@dataclass(frozen=True)
class SubjectPredicates:
    """Predicate set for subject list queries.

    ``ids`` restricts matches to a set of subjects; for the ``trends`` sort
    its order is also the result order.
    """

    type: int
    allow_nsfw: bool = False
    cat: int | None = None
    series: bool | None = None
    year: int | None = None
    month: int | None = None
    ids: tuple[int, ...] | None = None
    ranked_only: bool = False


class Store(ABC):
    """Abstract base class for the relational store."""

    async def get_by_id(self, kind: EntityKind, id: int, exclude_banned: bool = False) -> Any:
        """Fetch one row of ``kind``, or None if it does not exist."""
        rows = await self.get_by_ids(kind, [id], exclude_banned=exclude_banned)
        return rows[0] if rows else None

    @abstractmethod
    async def get_by_ids(
        self, kind: EntityKind, ids: Sequence[int], exclude_banned: bool = False
    ) -> list[Any]:
        """Fetch rows of ``kind`` whose id is in ``ids``.

        Rows come back in no particular order; ids without a row are skipped.
        Subjects are returned as ``SubjectRow``, other kinds as ORM rows.
        """

    @abstractmethod
    async def count_subjects(self, predicates: SubjectPredicates) -> int:
        """Count subjects matching ``predicates``."""

    @abstractmethod
    async def query_subject_ids(
        self, predicates: SubjectPredicates, sort: SubjectSort, limit: int, offset: int
    ) -> list[int]:
        """Return one page of subject ids matching ``predicates`` in ``sort`` order."""

    @abstractmethod
    async def find_tag_ids(self, cat: int, type: int, names: Sequence[str]) -> list[int]:
        """Resolve tag names to tag index ids."""

    @abstractmethod
    async def find_tagged_ids(self, cat: int, type: int, tag_ids: Sequence[int]) -> list[int]:
        """Distinct ids of items carrying any of ``tag_ids``."""

    @abstractmethod
    async def aggregate_subject_interests(
        self,
        subject_type: SubjectType,
        min_dateline: int,
        by_doing_dateline: bool,
        limit: int,
    ) -> list[InterestAggregate]:
        """Interest counts per subject since ``min_dateline``, highest first."""

    @abstractmethod
    async def aggregate_subject_topic_replies(
        self, min_dateline: int, limit: int
    ) -> list[InterestAggregate]:
        """Reply counts per subject topic since ``min_dateline``, highest first."""

    @abstractmethod
    async def calendar_items(self, year: int, month: int) -> list[CalendarRow]:
        """Airing anime for the season starting at ``year``/``month``."""

    @abstractmethod
    async def get_user_by_username(self, username: str) -> UserTable | None: ...

    @abstractmethod
    async def get_group_by_name(self, name: str, allow_nsfw: bool) -> GroupTable | None: ...

    @abstractmethod
    async def get_subject_interest(
        self, uid: int, subject_id: int
    ) -> SubjectInterestTable | None: ...

    @abstractmethod
    async def is_friends(self, uid: int, friend_id: int) -> bool:
        """Whether ``friend_id`` is in ``uid``'s friend list."""

    @abstractmethod
    async def casts_by_subject_and_characters(
        self, subject_id: int, character_ids: Sequence[int], allow_nsfw: bool
    ) -> list[CastRow]: ...

    @abstractmethod
    async def casts_by_character_and_subjects(
        self, character_id: int, subject_ids: Sequence[int], allow_nsfw: bool
    ) -> list[CastRow]: ...

    @abstractmethod
    async def casts_by_person_and_characters(
        self,
        person_id: int,
        character_ids: Sequence[int],
        subject_type: int | None,
        relation_type: int | None,
        allow_nsfw: bool,
    ) -> list[CastRelationRow]: ...


_TABLES: dict[EntityKind, Any] = {
    EntityKind.USER: UserTable,
    EntityKind.EPISODE: EpisodeTable,
    EntityKind.SUBJECT_TOPIC: SubjectTopicTable,
    EntityKind.CHARACTER: CharacterTable,
    EntityKind.PERSON: PersonTable,
    EntityKind.GROUP: GroupTable,
    EntityKind.GROUP_TOPIC: GroupTopicTable,
    EntityKind.BLOG_ENTRY: BlogEntryTable,
    EntityKind.INDEX: IndexTable,
}


def subject_conditions(predicates: SubjectPredicates) -> list[Any]:
    """Translate ``SubjectPredicates`` into SQL conditions."""
    conditions: list[Any] = [
        SubjectTable.type_id == predicates.type,
        SubjectTable.ban != 1,
    ]
    if not predicates.allow_nsfw:
        conditions.append(SubjectTable.nsfw.is_(False))
    if predicates.cat:
        conditions.append(SubjectTable.platform == predicates.cat)
    if predicates.series is not None:
        conditions.append(SubjectTable.series.is_(predicates.series))
    if predicates.year:
        conditions.append(SubjectFieldTable.year == predicates.year)
    if predicates.month:
        conditions.append(SubjectFieldTable.month == predicates.month)
    if predicates.ids is not None:
        conditions.append(SubjectTable.id.in_(predicates.ids))
    if predicates.ranked_only:
        conditions.append(SubjectFieldTable.rank != 0)
    return conditions


_SUBJECT_ORDER: dict[SubjectSort, Any] = {
    SubjectSort.RANK: SubjectFieldTable.rank.asc(),
    SubjectSort.COLLECTS: SubjectTable.collect.desc(),
    SubjectSort.DATE: SubjectFieldTable.date.desc(),
    SubjectSort.TITLE: SubjectTable.name.asc(),
}


def _subject_join() -> Any:
    return SubjectTable.id == SubjectFieldTable.id


class SqlStore(Store):
    """``Store`` backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Store query failed: {e}")
            raise StoreError(str(e)) from e

    async def get_by_ids(
        self, kind: EntityKind, ids: Sequence[int], exclude_banned: bool = False
    ) -> list[Any]:
        if not ids:
            return []

        if kind is EntityKind.SUBJECT:
            stmt = (
                select(SubjectTable, SubjectFieldTable)
                .join(SubjectFieldTable, _subject_join())
                .where(SubjectTable.id.in_(ids))
            )
            if exclude_banned:
                stmt = stmt.where(SubjectTable.ban != 1)
            async with self._session() as session:
                result = await session.execute(stmt)
                return [SubjectRow(subject=s, fields=f) for s, f in result.all()]

        table = _TABLES[kind]
        stmt = select(table).where(table.id.in_(ids))
        if exclude_banned and hasattr(table, "ban"):
            stmt = stmt.where(table.ban != 1)
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_subjects(self, predicates: SubjectPredicates) -> int:
        stmt = (
            select(func.count())
            .select_from(SubjectTable)
            .join(SubjectFieldTable, _subject_join())
            .where(*subject_conditions(predicates))
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one() or 0)

    async def query_subject_ids(
        self, predicates: SubjectPredicates, sort: SubjectSort, limit: int, offset: int
    ) -> list[int]:
        stmt = (
            select(SubjectTable.id)
            .join(SubjectFieldTable, _subject_join())
            .where(*subject_conditions(predicates))
        )
        if sort is SubjectSort.TRENDS:
            if not predicates.ids:
                return []
            rank = {subject_id: i for i, subject_id in enumerate(predicates.ids)}
            stmt = stmt.order_by(case(rank, value=SubjectTable.id))
        else:
            stmt = stmt.order_by(_SUBJECT_ORDER[sort])
        stmt = stmt.limit(limit).offset(offset)

        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_tag_ids(self, cat: int, type: int, names: Sequence[str]) -> list[int]:
        if not names:
            return []
        stmt = select(TagIndexTable.id).where(
            TagIndexTable.cat == cat,
            TagIndexTable.type == type,
            TagIndexTable.name.in_(names),
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_tagged_ids(self, cat: int, type: int, tag_ids: Sequence[int]) -> list[int]:
        if not tag_ids:
            return []
        stmt = select(distinct(TagListTable.main_id)).where(
            TagListTable.cat == cat,
            TagListTable.type == type,
            TagListTable.tag_id.in_(tag_ids),
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def aggregate_subject_interests(
        self,
        subject_type: SubjectType,
        min_dateline: int,
        by_doing_dateline: bool,
        limit: int,
    ) -> list[InterestAggregate]:
        window = (
            SubjectInterestTable.doing_dateline > min_dateline
            if by_doing_dateline
            else SubjectInterestTable.updated_at > min_dateline
        )
        total = func.count(SubjectTable.id).label("total")
        stmt = (
            select(SubjectTable.id, total)
            .select_from(SubjectInterestTable)
            .join(SubjectTable, SubjectTable.id == SubjectInterestTable.subject_id)
            .where(
                SubjectTable.type_id == int(subject_type),
                SubjectTable.ban != 1,
                SubjectTable.nsfw.is_(False),
                window,
            )
            .group_by(SubjectTable.id)
            .order_by(desc(total))
            .limit(limit)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return [InterestAggregate(id=row[0], total=row[1]) for row in result.all()]

    async def aggregate_subject_topic_replies(
        self, min_dateline: int, limit: int
    ) -> list[InterestAggregate]:
        total = func.count(SubjectPostTable.id).label("total")
        stmt = (
            select(SubjectTopicTable.id, total)
            .select_from(SubjectPostTable)
            .join(SubjectTopicTable, SubjectTopicTable.id == SubjectPostTable.topic_id)
            .where(
                SubjectTopicTable.display == 1,
                SubjectPostTable.dateline > min_dateline,
            )
            .group_by(SubjectTopicTable.id)
            .order_by(desc(total))
            .limit(limit)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return [InterestAggregate(id=row[0], total=row[1]) for row in result.all()]

    async def calendar_items(self, year: int, month: int) -> list[CalendarRow]:
        stmt = (
            select(SubjectTable.id, SubjectFieldTable.weekday, SubjectTable.doing)
            .join(SubjectFieldTable, _subject_join())
            .where(
                SubjectTable.ban != 1,
                SubjectTable.type_id == int(SubjectType.ANIME),
                SubjectTable.platform.in_(CALENDAR_PLATFORMS),
                SubjectFieldTable.year == year,
                SubjectFieldTable.month == month,
            )
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return [CalendarRow(id=r[0], weekday=r[1], watchers=r[2]) for r in result.all()]

    async def get_user_by_username(self, username: str) -> UserTable | None:
        stmt = select(UserTable).where(UserTable.username == username).limit(1)
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_group_by_name(self, name: str, allow_nsfw: bool) -> GroupTable | None:
        stmt = select(GroupTable).where(GroupTable.name == name)
        if not allow_nsfw:
            stmt = stmt.where(GroupTable.nsfw.is_(False))
        async with self._session() as session:
            result = await session.execute(stmt.limit(1))
            return result.scalars().first()

    async def get_subject_interest(
        self, uid: int, subject_id: int
    ) -> SubjectInterestTable | None:
        stmt = (
            select(SubjectInterestTable)
            .where(
                SubjectInterestTable.type != 0,
                SubjectInterestTable.uid == uid,
                SubjectInterestTable.subject_id == subject_id,
            )
            .limit(1)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.scalars().first()

    async def is_friends(self, uid: int, friend_id: int) -> bool:
        stmt = (
            select(FriendTable.uid)
            .where(FriendTable.uid == uid, FriendTable.fid == friend_id)
            .limit(1)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return result.first() is not None

    async def casts_by_subject_and_characters(
        self, subject_id: int, character_ids: Sequence[int], allow_nsfw: bool
    ) -> list[CastRow]:
        return await self._casts(
            CharacterCastTable.subject_id == subject_id,
            CharacterCastTable.character_id.in_(character_ids),
            allow_nsfw=allow_nsfw,
        )

    async def casts_by_character_and_subjects(
        self, character_id: int, subject_ids: Sequence[int], allow_nsfw: bool
    ) -> list[CastRow]:
        return await self._casts(
            CharacterCastTable.character_id == character_id,
            CharacterCastTable.subject_id.in_(subject_ids),
            allow_nsfw=allow_nsfw,
        )

    async def _casts(self, *conditions: Any, allow_nsfw: bool) -> list[CastRow]:
        stmt = (
            select(CharacterCastTable, PersonTable)
            .join(PersonTable, CharacterCastTable.person_id == PersonTable.id)
            .where(*conditions, PersonTable.ban != 1)
        )
        if not allow_nsfw:
            stmt = stmt.where(PersonTable.nsfw.is_(False))
        async with self._session() as session:
            result = await session.execute(stmt)
            return [
                CastRow(character_id=cast.character_id, subject_id=cast.subject_id, person=person)
                for cast, person in result.all()
            ]

    async def casts_by_person_and_characters(
        self,
        person_id: int,
        character_ids: Sequence[int],
        subject_type: int | None,
        relation_type: int | None,
        allow_nsfw: bool,
    ) -> list[CastRelationRow]:
        stmt = (
            select(CharacterCastTable, SubjectTable, SubjectFieldTable, CharacterSubjectTable)
            .join(SubjectTable, CharacterCastTable.subject_id == SubjectTable.id)
            .join(SubjectFieldTable, _subject_join())
            .join(
                CharacterSubjectTable,
                and_(
                    CharacterCastTable.character_id == CharacterSubjectTable.character_id,
                    CharacterCastTable.subject_id == CharacterSubjectTable.subject_id,
                ),
            )
            .where(
                CharacterCastTable.person_id == person_id,
                CharacterCastTable.character_id.in_(character_ids),
                SubjectTable.ban != 1,
            )
        )
        if subject_type:
            stmt = stmt.where(CharacterCastTable.subject_type == subject_type)
        if relation_type:
            stmt = stmt.where(CharacterSubjectTable.type == relation_type)
        if not allow_nsfw:
            stmt = stmt.where(SubjectTable.nsfw.is_(False))
        async with self._session() as session:
            result = await session.execute(stmt)
            return [
                CastRelationRow(
                    character_id=cast.character_id,
                    subject=subject,
                    fields=fields,
                    relation=relation,
                )
                for cast, subject, fields, relation in result.all()
            ]
