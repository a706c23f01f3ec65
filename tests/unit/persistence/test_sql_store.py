"""Tests for the SQLAlchemy store with a mocked session."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from chii.core.types import SubjectSort, SubjectType
from chii.errors import StoreError
from chii.persistence.rows import SubjectRow
from chii.persistence.store import EntityKind, SqlStore, SubjectPredicates, subject_conditions


@pytest.fixture
def result() -> MagicMock:
    return MagicMock()


@pytest.fixture
def session(result: MagicMock) -> AsyncMock:
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    return session


@pytest.fixture
def sql_store(session: AsyncMock) -> SqlStore:
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    return SqlStore(factory)


def _sql(session: AsyncMock) -> str:
    stmt = session.execute.await_args.args[0]
    return str(stmt)


def _where(session: AsyncMock) -> str:
    return _sql(session).split("WHERE", 1)[-1]


class TestGetByIds:
    """Tests for entity lookups."""

    @pytest.mark.asyncio
    async def test_empty_ids(self, sql_store, session) -> None:
        assert await sql_store.get_by_ids(EntityKind.USER, []) == []
        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ban_filter(self, sql_store, session, result) -> None:
        result.scalars.return_value.all.return_value = []

        await sql_store.get_by_ids(EntityKind.CHARACTER, [1], exclude_banned=True)
        assert "crt_ban" in _where(session)

        await sql_store.get_by_ids(EntityKind.CHARACTER, [1])
        assert "crt_ban" not in _where(session)

    @pytest.mark.asyncio
    async def test_subject_rows(self, sql_store, session, result, rows) -> None:
        """Subjects come back joined with their fields."""
        row = rows.subject(1)
        result.all.return_value = [(row.subject, row.fields)]

        loaded = await sql_store.get_by_ids(EntityKind.SUBJECT, [1], exclude_banned=True)

        assert loaded == [SubjectRow(subject=row.subject, fields=row.fields)]
        sql = _sql(session)
        assert "chii_subject_fields" in sql
        assert "subject_ban" in _where(session)

    @pytest.mark.asyncio
    async def test_get_by_id(self, sql_store, result, rows) -> None:
        user = rows.user(1)
        result.scalars.return_value.all.return_value = [user]

        assert await sql_store.get_by_id(EntityKind.USER, 1) is user

    @pytest.mark.asyncio
    async def test_driver_error_wrapped(self, sql_store, session) -> None:
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

        with pytest.raises(StoreError):
            await sql_store.get_by_ids(EntityKind.USER, [1])


class TestSubjectQueries:
    """Tests for subject list queries."""

    def test_conditions(self) -> None:
        """Optional predicates only add conditions when set."""
        base = subject_conditions(SubjectPredicates(type=2))
        full = subject_conditions(
            SubjectPredicates(
                type=2,
                allow_nsfw=True,
                cat=1,
                series=False,
                year=2024,
                month=4,
                ids=(1, 2),
                ranked_only=True,
            )
        )

        assert len(base) == 3
        assert len(full) == 8

    @pytest.mark.asyncio
    async def test_count(self, sql_store, session, result) -> None:
        result.scalar_one.return_value = 7

        assert await sql_store.count_subjects(SubjectPredicates(type=2)) == 7
        assert "count" in _sql(session).lower()

    @pytest.mark.asyncio
    async def test_query_page(self, sql_store, session, result) -> None:
        result.scalars.return_value.all.return_value = [3, 1]

        ids = await sql_store.query_subject_ids(
            SubjectPredicates(type=2, ranked_only=True), SubjectSort.RANK, limit=24, offset=24
        )

        assert ids == [3, 1]
        sql = _sql(session)
        assert "ORDER BY" in sql
        assert "field_rank" in sql
        assert "LIMIT" in sql

    @pytest.mark.asyncio
    async def test_trends_order(self, sql_store, session, result) -> None:
        result.scalars.return_value.all.return_value = [30, 10]

        await sql_store.query_subject_ids(
            SubjectPredicates(type=2, ids=(30, 10)), SubjectSort.TRENDS, limit=24, offset=0
        )

        assert "CASE" in _sql(session)

    @pytest.mark.asyncio
    async def test_trends_without_ids(self, sql_store, session) -> None:
        ids = await sql_store.query_subject_ids(
            SubjectPredicates(type=2), SubjectSort.TRENDS, limit=24, offset=0
        )

        assert ids == []
        session.execute.assert_not_awaited()


class TestAggregates:
    """Tests for trending aggregates."""

    @pytest.mark.asyncio
    async def test_interest_window_column(self, sql_store, session, result) -> None:
        result.all.return_value = [(1, 5)]

        doing = await sql_store.aggregate_subject_interests(
            SubjectType.ANIME, min_dateline=100, by_doing_dateline=True, limit=1000
        )
        assert "interest_doing_dateline" in _sql(session)

        await sql_store.aggregate_subject_interests(
            SubjectType.BOOK, min_dateline=100, by_doing_dateline=False, limit=1000
        )
        assert "interest_lasttouch" in _sql(session)

        assert doing[0].id == 1
        assert doing[0].total == 5

    @pytest.mark.asyncio
    async def test_topic_replies(self, sql_store, session, result) -> None:
        result.all.return_value = [(4, 2)]

        topics = await sql_store.aggregate_subject_topic_replies(min_dateline=100, limit=1000)

        assert topics[0].id == 4
        assert "sbj_tpc_display" in _sql(session)


class TestLookups:
    """Tests for the remaining lookups."""

    @pytest.mark.asyncio
    async def test_is_friends(self, sql_store, result) -> None:
        result.first.return_value = (1,)
        assert await sql_store.is_friends(1, 2) is True

        result.first.return_value = None
        assert await sql_store.is_friends(1, 2) is False

    @pytest.mark.asyncio
    async def test_calendar(self, sql_store, session, result) -> None:
        result.all.return_value = [(1, 3, 99)]

        items = await sql_store.calendar_items(2024, 4)

        assert items[0].weekday == 3
        assert items[0].watchers == 99
        assert "subject_platform" in _sql(session)

    @pytest.mark.asyncio
    async def test_group_by_name_nsfw(self, sql_store, session, result) -> None:
        result.scalars.return_value.first.return_value = None

        await sql_store.get_group_by_name("g", allow_nsfw=False)
        assert "grp_nsfw" in _where(session)

        await sql_store.get_group_by_name("g", allow_nsfw=True)
        assert "grp_nsfw" not in _where(session)
