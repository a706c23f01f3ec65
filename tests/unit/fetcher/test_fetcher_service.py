"""Tests for the Fetcher entry point."""

import pytest

from chii.core.types import SubjectFilter, SubjectSort, SubjectType
from chii.fetcher import Fetcher
from chii.persistence.rows import CastRelationRow, CastRow
from chii.persistence.store import EntityKind


@pytest.fixture
def fetcher(cache, store) -> Fetcher:
    return Fetcher(cache, store)


class TestUsers:
    """Tests for user lookups."""

    @pytest.mark.asyncio
    async def test_by_username(self, fetcher, store, rows) -> None:
        store.users_by_name["alice"] = rows.user(1, "alice")

        user = await fetcher.fetch_slim_user_by_username("alice")

        assert user is not None
        assert user.id == 1
        assert await fetcher.fetch_slim_user_by_username("bob") is None

    @pytest.mark.asyncio
    async def test_by_id_and_ids(self, fetcher, store, rows) -> None:
        store.add(EntityKind.USER, rows.user(1), rows.user(2))

        assert (await fetcher.fetch_slim_user_by_id(1)).username == "user1"
        users = await fetcher.fetch_slim_users_by_ids([1, 2, 3])
        assert set(users) == {1, 2}

    @pytest.mark.asyncio
    async def test_simple_users(self, fetcher, store, rows) -> None:
        store.add(EntityKind.USER, rows.user(1))

        users = await fetcher.fetch_simple_users_by_ids([1])

        assert users[1].nickname == "nick1"


class TestSubjects:
    """Tests for subject lookups."""

    @pytest.mark.asyncio
    async def test_slim_and_full_cached_apart(self, fetcher, cache, store, rows) -> None:
        store.add(EntityKind.SUBJECT, rows.subject(1, collect=9))

        slim = await fetcher.fetch_slim_subject_by_id(1)
        full = await fetcher.fetch_subject_by_id(1)

        assert slim is not None and full is not None
        assert full.collects == 9
        assert "chii:subject:slim:1" in cache.data
        assert "chii:subject:item:1" in cache.data

    @pytest.mark.asyncio
    async def test_nsfw(self, fetcher, store, rows) -> None:
        store.add(EntityKind.SUBJECT, rows.subject(1, nsfw=True), rows.subject(2))

        assert await fetcher.fetch_subject_by_id(1) is None
        assert await fetcher.fetch_subject_by_id(1, allow_nsfw=True) is not None
        assert set(await fetcher.fetch_subjects_by_ids([1, 2])) == {2}
        assert set(await fetcher.fetch_slim_subjects_by_ids([1, 2], allow_nsfw=True)) == {1, 2}

    @pytest.mark.asyncio
    async def test_ids_by_filter(self, fetcher, store) -> None:
        store.list_ids = [3, 4]

        page = await fetcher.fetch_subject_ids_by_filter(
            SubjectFilter(type=SubjectType.ANIME), SubjectSort.RANK
        )

        assert page.data == [3, 4]
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_interest(self, fetcher, store, rows) -> None:
        store.subject_interests[(1, 2)] = rows.interest(1, 2, tag="a b")

        interest = await fetcher.fetch_subject_interest(1, 2)

        assert interest is not None
        assert interest.tags == ["a", "b"]
        assert await fetcher.fetch_subject_interest(1, 3) is None

    @pytest.mark.asyncio
    async def test_episodes(self, fetcher, store, rows) -> None:
        store.add(EntityKind.EPISODE, rows.episode(1), rows.episode(2, ban=1))

        assert await fetcher.fetch_episode_by_id(1) is not None
        assert await fetcher.fetch_episode_by_id(2) is None
        assert set(await fetcher.fetch_episodes_by_ids([1, 2])) == {1}

    @pytest.mark.asyncio
    async def test_topics(self, fetcher, store, rows) -> None:
        store.add(EntityKind.SUBJECT_TOPIC, rows.subject_topic(1))
        store.add(EntityKind.GROUP_TOPIC, rows.group_topic(1))

        subject_topics = await fetcher.fetch_subject_topics_by_ids([1])
        group_topics = await fetcher.fetch_group_topics_by_ids([1])

        assert subject_topics[1].parent_id == 1
        assert group_topics[1].parent_id == 7


class TestCharactersAndPersons:
    """Tests for character, person and cast lookups."""

    @pytest.mark.asyncio
    async def test_characters(self, fetcher, store, rows) -> None:
        store.add(EntityKind.CHARACTER, rows.character(1), rows.character(2, ban=1))

        assert await fetcher.fetch_slim_character_by_id(1) is not None
        assert set(await fetcher.fetch_slim_characters_by_ids([1, 2])) == {1}

    @pytest.mark.asyncio
    async def test_persons(self, fetcher, store, rows) -> None:
        store.add(EntityKind.PERSON, rows.person(1, nsfw=True))

        assert await fetcher.fetch_slim_person_by_id(1) is None
        assert set(await fetcher.fetch_slim_persons_by_ids([1], allow_nsfw=True)) == {1}

    @pytest.mark.asyncio
    async def test_casts_by_subject(self, fetcher, store, rows) -> None:
        """Casts are grouped by character."""
        store.casts = [
            CastRow(character_id=1, subject_id=9, person=rows.person(10)),
            CastRow(character_id=1, subject_id=9, person=rows.person(11)),
            CastRow(character_id=2, subject_id=9, person=rows.person(12)),
        ]

        casts = await fetcher.fetch_casts_by_subject_and_character_ids(9, [1, 2], False)

        assert {k: [p.id for p in v] for k, v in casts.items()} == {1: [10, 11], 2: [12]}

    @pytest.mark.asyncio
    async def test_casts_by_character(self, fetcher, store, rows) -> None:
        """Casts are grouped by subject."""
        store.casts = [
            CastRow(character_id=1, subject_id=8, person=rows.person(10)),
            CastRow(character_id=1, subject_id=9, person=rows.person(11, nsfw=True)),
        ]

        casts = await fetcher.fetch_casts_by_character_and_subject_ids(1, [8, 9], False)

        assert list(casts) == [8]

    @pytest.mark.asyncio
    async def test_casts_by_person(self, fetcher, store, rows) -> None:
        subject = rows.subject(9)
        store.cast_relations = [
            CastRelationRow(
                character_id=1,
                subject=subject.subject,
                fields=subject.fields,
                relation=rows.relation(1, 9),
            )
        ]

        casts = await fetcher.fetch_casts_by_person_and_character_ids(5, [1], None, None, False)

        assert casts[1][0].subject.id == 9

    @pytest.mark.asyncio
    async def test_empty_cast_inputs(self, fetcher, store) -> None:
        assert await fetcher.fetch_casts_by_subject_and_character_ids(1, [], False) == {}
        assert await fetcher.fetch_casts_by_character_and_subject_ids(1, [], False) == {}
        assert await fetcher.fetch_casts_by_person_and_character_ids(1, [], None, None, False) == {}
        assert store.calls == []


class TestGroupsIndexesBlogs:
    """Tests for group, index and blog lookups."""

    @pytest.mark.asyncio
    async def test_group_by_name(self, fetcher, store, rows) -> None:
        store.groups_by_name["boys"] = rows.group(1, "boys", nsfw=True)

        assert await fetcher.fetch_slim_group_by_name("boys") is None
        assert await fetcher.fetch_slim_group_by_name("boys", allow_nsfw=True) is not None

    @pytest.mark.asyncio
    async def test_groups_by_id(self, fetcher, store, rows) -> None:
        store.add(EntityKind.GROUP, rows.group(1), rows.group(2, nsfw=True))

        assert await fetcher.fetch_slim_group_by_id(2) is None
        assert set(await fetcher.fetch_slim_groups_by_ids([1, 2])) == {1}

    @pytest.mark.asyncio
    async def test_index(self, fetcher, store, rows) -> None:
        store.add(EntityKind.INDEX, rows.index(1), rows.index(2, ban=1))

        assert await fetcher.fetch_slim_index_by_id(1) is not None
        assert await fetcher.fetch_slim_index_by_id(2) is None

    @pytest.mark.asyncio
    async def test_blog_entry_privacy(self, fetcher, store, rows) -> None:
        store.add(EntityKind.BLOG_ENTRY, rows.blog_entry(1, uid=5, public=False))

        assert await fetcher.fetch_slim_blog_entry_by_id(1, 5) is not None
        assert await fetcher.fetch_slim_blog_entry_by_id(1, 0) is None
