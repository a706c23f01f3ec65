"""Shared fixtures for chii unit tests.

Provides in-memory ``Cache`` and ``Store`` implementations and row builders,
so fetchers and the trending aggregator can be exercised without Redis or a
database.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest

from chii.cache.base import Cache
from chii.core.types import SubjectSort, SubjectType
from chii.persistence.rows import (
    CalendarRow,
    CastRelationRow,
    CastRow,
    InterestAggregate,
    SubjectRow,
)
from chii.persistence.store import EntityKind, Store, SubjectPredicates
from chii.persistence.tables import (
    BlogEntryTable,
    CharacterSubjectTable,
    CharacterTable,
    EpisodeTable,
    GroupTable,
    GroupTopicTable,
    IndexTable,
    PersonTable,
    SubjectFieldTable,
    SubjectInterestTable,
    SubjectTable,
    SubjectTopicTable,
    UserTable,
)


class FakeClock:
    """Manually advanced unix clock in seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MemoryCache(Cache):
    """Dict-backed cache with TTL expiry driven by a ``FakeClock``."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.data: dict[str, tuple[bytes, float | None]] = {}
        self.ttls: dict[str, int | None] = {}
        self.calls: list[str] = []

    def _live(self, key: str) -> bytes | None:
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return None
        return value

    async def get(self, key: str) -> bytes | None:
        self.calls.append("get")
        return self._live(key)

    async def mget(self, keys: Sequence[str]) -> list[bytes | None]:
        self.calls.append("mget")
        return [self._live(key) for key in keys]

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> None:
        self.calls.append("set")
        expires_at = self.clock() + ttl if ttl else None
        self.data[key] = (value, expires_at)
        self.ttls[key] = ttl

    async def set_if_absent(self, key: str, value: bytes, ttl: int) -> bool:
        self.calls.append("set_if_absent")
        if self._live(key) is not None:
            return False
        self.data[key] = (value, self.clock() + ttl)
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys: str) -> int:
        self.calls.append("delete")
        deleted = 0
        for key in keys:
            if self._live(key) is not None:
                deleted += 1
            self.data.pop(key, None)
        return deleted

    async def release_if_owner(self, key: str, value: bytes) -> bool:
        self.calls.append("release_if_owner")
        if self._live(key) != value:
            return False
        del self.data[key]
        return True


def _is_banned(row: Any) -> bool:
    if isinstance(row, SubjectRow):
        return row.subject.ban == 1
    return getattr(row, "ban", 0) == 1


class FakeStore(Store):
    """In-memory store recording every call.

    Set ``error`` to make every method raise it.
    """

    def __init__(self) -> None:
        self.rows: dict[EntityKind, dict[int, Any]] = {kind: {} for kind in EntityKind}
        self.list_ids: list[int] = []
        self.tags: dict[str, int] = {}
        self.tagged: dict[int, list[int]] = {}
        self.interests: dict[SubjectType, list[InterestAggregate]] = {}
        self.topic_replies: list[InterestAggregate] = []
        self.calendar: list[CalendarRow] = []
        self.users_by_name: dict[str, UserTable] = {}
        self.groups_by_name: dict[str, GroupTable] = {}
        self.subject_interests: dict[tuple[int, int], SubjectInterestTable] = {}
        self.friends: set[tuple[int, int]] = set()
        self.casts: list[CastRow] = []
        self.cast_relations: list[CastRelationRow] = []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.error: Exception | None = None

    def add(self, kind: EntityKind, *rows: Any) -> None:
        for row in rows:
            self.rows[kind][row.id] = row

    def called(self, method: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == method]

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if self.error is not None:
            raise self.error

    async def get_by_ids(
        self, kind: EntityKind, ids: Sequence[int], exclude_banned: bool = False
    ) -> list[Any]:
        self._record("get_by_ids", kind, list(ids), exclude_banned)
        rows = [self.rows[kind][id] for id in ids if id in self.rows[kind]]
        if exclude_banned:
            rows = [row for row in rows if not _is_banned(row)]
        return rows

    def _matching(self, predicates: SubjectPredicates) -> list[int]:
        if predicates.ids is None:
            return list(self.list_ids)
        allowed = set(self.list_ids)
        return [id for id in predicates.ids if id in allowed]

    async def count_subjects(self, predicates: SubjectPredicates) -> int:
        self._record("count_subjects", predicates)
        return len(self._matching(predicates))

    async def query_subject_ids(
        self, predicates: SubjectPredicates, sort: SubjectSort, limit: int, offset: int
    ) -> list[int]:
        self._record("query_subject_ids", predicates, sort, limit, offset)
        return self._matching(predicates)[offset : offset + limit]

    async def find_tag_ids(self, cat: int, type: int, names: Sequence[str]) -> list[int]:
        self._record("find_tag_ids", cat, type, list(names))
        return [self.tags[name] for name in names if name in self.tags]

    async def find_tagged_ids(self, cat: int, type: int, tag_ids: Sequence[int]) -> list[int]:
        self._record("find_tagged_ids", cat, type, list(tag_ids))
        ids: list[int] = []
        for tag_id in tag_ids:
            ids.extend(self.tagged.get(tag_id, []))
        return list(dict.fromkeys(ids))

    async def aggregate_subject_interests(
        self,
        subject_type: SubjectType,
        min_dateline: int,
        by_doing_dateline: bool,
        limit: int,
    ) -> list[InterestAggregate]:
        self._record(
            "aggregate_subject_interests", subject_type, min_dateline, by_doing_dateline, limit
        )
        return list(self.interests.get(subject_type, []))[:limit]

    async def aggregate_subject_topic_replies(
        self, min_dateline: int, limit: int
    ) -> list[InterestAggregate]:
        self._record("aggregate_subject_topic_replies", min_dateline, limit)
        return list(self.topic_replies)[:limit]

    async def calendar_items(self, year: int, month: int) -> list[CalendarRow]:
        self._record("calendar_items", year, month)
        return list(self.calendar)

    async def get_user_by_username(self, username: str) -> UserTable | None:
        self._record("get_user_by_username", username)
        return self.users_by_name.get(username)

    async def get_group_by_name(self, name: str, allow_nsfw: bool) -> GroupTable | None:
        self._record("get_group_by_name", name, allow_nsfw)
        group = self.groups_by_name.get(name)
        if group is not None and group.nsfw and not allow_nsfw:
            return None
        return group

    async def get_subject_interest(
        self, uid: int, subject_id: int
    ) -> SubjectInterestTable | None:
        self._record("get_subject_interest", uid, subject_id)
        return self.subject_interests.get((uid, subject_id))

    async def is_friends(self, uid: int, friend_id: int) -> bool:
        self._record("is_friends", uid, friend_id)
        return (uid, friend_id) in self.friends

    async def casts_by_subject_and_characters(
        self, subject_id: int, character_ids: Sequence[int], allow_nsfw: bool
    ) -> list[CastRow]:
        self._record("casts_by_subject_and_characters", subject_id, list(character_ids))
        return [
            c
            for c in self.casts
            if c.subject_id == subject_id
            and c.character_id in character_ids
            and (allow_nsfw or not c.person.nsfw)
        ]

    async def casts_by_character_and_subjects(
        self, character_id: int, subject_ids: Sequence[int], allow_nsfw: bool
    ) -> list[CastRow]:
        self._record("casts_by_character_and_subjects", character_id, list(subject_ids))
        return [
            c
            for c in self.casts
            if c.character_id == character_id
            and c.subject_id in subject_ids
            and (allow_nsfw or not c.person.nsfw)
        ]

    async def casts_by_person_and_characters(
        self,
        person_id: int,
        character_ids: Sequence[int],
        subject_type: int | None,
        relation_type: int | None,
        allow_nsfw: bool,
    ) -> list[CastRelationRow]:
        self._record("casts_by_person_and_characters", person_id, list(character_ids))
        return [c for c in self.cast_relations if c.character_id in character_ids]


class RowFactory:
    """Builders for ORM rows with every column populated."""

    def user(self, id: int, username: str = "", **kw: Any) -> UserTable:
        return UserTable(
            id=id,
            username=username or f"user{id}",
            nickname=kw.get("nickname", f"nick{id}"),
            avatar=kw.get("avatar", ""),
            sign=kw.get("sign", ""),
            regdate=kw.get("regdate", 1_600_000_000),
        )

    def subject(
        self, id: int, nsfw: bool = False, ban: int = 0, type_id: int = 2, **kw: Any
    ) -> SubjectRow:
        subject = SubjectTable(
            id=id,
            type_id=type_id,
            name=kw.get("name", f"subject {id}"),
            name_cn=kw.get("name_cn", ""),
            platform=kw.get("platform", 1),
            infobox="",
            summary="",
            image=kw.get("image", ""),
            eps=kw.get("eps", 12),
            volumes=0,
            collect=kw.get("collect", 0),
            doing=0,
            series=False,
            nsfw=nsfw,
            ban=ban,
        )
        rates = kw.get("rates", [0] * 10)
        fields = SubjectFieldTable(
            id=id,
            rank=kw.get("rank", 0),
            date=kw.get("date"),
            year=kw.get("year", 2024),
            month=kw.get("month", 4),
            weekday=kw.get("weekday", 0),
            redirect=0,
            locked=False,
            **{f"rate_{i + 1}": rates[i] for i in range(10)},
        )
        return SubjectRow(subject=subject, fields=fields)

    def episode(self, id: int, ban: int = 0) -> EpisodeTable:
        return EpisodeTable(
            id=id,
            subject_id=1,
            sort=float(id),
            type=0,
            disc=0,
            name=f"ep {id}",
            name_cn="",
            duration="24m",
            airdate="2024-04-01",
            comment=0,
            desc="",
            ban=ban,
        )

    def subject_topic(self, id: int, display: int = 1) -> SubjectTopicTable:
        return SubjectTopicTable(
            id=id,
            subject_id=1,
            uid=1,
            title=f"topic {id}",
            dateline=1_700_000_000,
            lastpost=1_700_000_100,
            replies=3,
            state=0,
            display=display,
        )

    def group_topic(self, id: int) -> GroupTopicTable:
        return GroupTopicTable(
            id=id,
            group_id=7,
            uid=1,
            title=f"topic {id}",
            dateline=1_700_000_000,
            lastpost=1_700_000_100,
            replies=0,
            state=0,
            display=1,
        )

    def character(self, id: int, nsfw: bool = False, ban: int = 0) -> CharacterTable:
        return CharacterTable(
            id=id,
            name=f"character {id}",
            role=1,
            image="",
            comment=0,
            nsfw=nsfw,
            ban=ban,
            lock=False,
        )

    def person(self, id: int, nsfw: bool = False, ban: int = 0, **careers: bool) -> PersonTable:
        return PersonTable(
            id=id,
            name=f"person {id}",
            type=1,
            image="",
            producer=careers.get("producer", False),
            mangaka=careers.get("mangaka", False),
            artist=careers.get("artist", False),
            seiyu=careers.get("seiyu", False),
            writer=careers.get("writer", False),
            illustrator=careers.get("illustrator", False),
            actor=careers.get("actor", False),
            comment=0,
            nsfw=nsfw,
            ban=ban,
            lock=False,
        )

    def group(self, id: int, name: str = "", nsfw: bool = False) -> GroupTable:
        return GroupTable(
            id=id,
            name=name or f"group{id}",
            title=f"Group {id}",
            icon="",
            creator=1,
            members=10,
            nsfw=nsfw,
            accessible=True,
            created_at=1_600_000_000,
        )

    def blog_entry(self, id: int, uid: int, public: bool = True, content: str = "") -> BlogEntryTable:
        return BlogEntryTable(
            id=id,
            uid=uid,
            title=f"entry {id}",
            icon="",
            content=content or "hello",
            replies=0,
            type=0,
            public=public,
            dateline=1_700_000_000,
            lastpost=1_700_000_000,
        )

    def index(self, id: int, ban: int = 0, stats: str = "") -> IndexTable:
        return IndexTable(
            id=id,
            uid=1,
            title=f"index {id}",
            private=False,
            total=2,
            stats=stats,
            ban=ban,
            dateline=1_700_000_000,
            lasttouch=1_700_000_000,
        )

    def interest(self, uid: int, subject_id: int, tag: str = "") -> SubjectInterestTable:
        return SubjectInterestTable(
            id=1,
            uid=uid,
            subject_id=subject_id,
            subject_type=2,
            type=2,
            rate=8,
            comment="nice",
            tag=tag,
            ep_status=12,
            vol_status=0,
            private=False,
            doing_dateline=1_700_000_000,
            updated_at=1_700_000_000,
        )

    def relation(self, character_id: int, subject_id: int, type: int = 1) -> CharacterSubjectTable:
        return CharacterSubjectTable(
            character_id=character_id,
            subject_id=subject_id,
            subject_type=2,
            type=type,
            order=0,
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(clock)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def rows() -> RowFactory:
    return RowFactory()
