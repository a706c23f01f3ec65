"""Entry point for entity lookups.

``Fetcher`` bundles the cached per-kind lookups, the uncached lookups that
go straight to the store (by name, interests, cast relations), and the list
cache. Cache and store are passed in; nothing here reaches for globals.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from chii.cache.base import Cache
from chii.core import convert
from chii.core import model as res
from chii.core.types import SubjectFilter, SubjectSort
from chii.core.visibility import VisibilityOptions
from chii.fetcher import entities
from chii.fetcher.entity import EntityFetcher
from chii.fetcher.lists import ListCache
from chii.persistence.store import Store
from chii.trending.aggregator import TrendingAggregator


class Fetcher:
    """Read-through lookups for every entity kind."""

    def __init__(
        self,
        cache: Cache,
        store: Store,
        trending: TrendingAggregator | None = None,
    ):
        self.cache = cache
        self.store = store
        self.entities = EntityFetcher(cache, store)
        self.trending = trending or TrendingAggregator(cache, store)
        self.lists = ListCache(cache, store, trending=self.trending)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def fetch_slim_user_by_username(self, username: str) -> res.SlimUser | None:
        """Not cached: usernames are not cache keys."""
        user = await self.store.get_user_by_username(username)
        if user is None:
            return None
        return convert.to_slim_user(user)

    async def fetch_slim_user_by_id(self, uid: int) -> res.SlimUser | None:
        return await self.entities.fetch_by_id(entities.SLIM_USER, uid)

    async def fetch_slim_users_by_ids(self, ids: Iterable[int]) -> dict[int, res.SlimUser]:
        return await self.entities.fetch_by_ids(entities.SLIM_USER, ids)

    async def fetch_simple_users_by_ids(self, ids: Iterable[int]) -> dict[int, res.SimpleUser]:
        slims = await self.fetch_slim_users_by_ids(ids)
        return {id: convert.to_simple_user(slim) for id, slim in slims.items()}

    # -------------------------------------------------------------------------
    # Subjects
    # -------------------------------------------------------------------------

    async def fetch_slim_subject_by_id(
        self, id: int, allow_nsfw: bool = False
    ) -> res.SlimSubject | None:
        return await self.entities.fetch_by_id(
            entities.SLIM_SUBJECT, id, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_slim_subjects_by_ids(
        self, ids: Iterable[int], allow_nsfw: bool = False
    ) -> dict[int, res.SlimSubject]:
        return await self.entities.fetch_by_ids(
            entities.SLIM_SUBJECT, ids, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_subject_by_id(self, id: int, allow_nsfw: bool = False) -> res.Subject | None:
        return await self.entities.fetch_by_id(
            entities.SUBJECT, id, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_subjects_by_ids(
        self, ids: Iterable[int], allow_nsfw: bool = False
    ) -> dict[int, res.Subject]:
        return await self.entities.fetch_by_ids(
            entities.SUBJECT, ids, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_subject_ids_by_filter(
        self, filter: SubjectFilter, sort: SubjectSort, page: int = 1
    ) -> res.Paged[int]:
        return await self.lists.fetch_page(filter, sort, page)

    async def fetch_subject_on_air_items(self) -> list[res.CalendarItem]:
        return await self.lists.fetch_calendar()

    async def fetch_subject_interest(
        self, uid: int, subject_id: int
    ) -> res.SubjectInterest | None:
        """Not cached: interests change with every collection update."""
        interest = await self.store.get_subject_interest(uid, subject_id)
        if interest is None:
            return None
        return convert.to_subject_interest(interest)

    async def fetch_subject_topics_by_ids(self, ids: Iterable[int]) -> dict[int, res.Topic]:
        return await self.entities.fetch_by_ids(entities.SUBJECT_TOPIC, ids)

    async def fetch_episode_by_id(self, episode_id: int) -> res.Episode | None:
        return await self.entities.fetch_by_id(entities.EPISODE, episode_id)

    async def fetch_episodes_by_ids(self, episode_ids: Iterable[int]) -> dict[int, res.Episode]:
        return await self.entities.fetch_by_ids(entities.EPISODE, episode_ids)

    # -------------------------------------------------------------------------
    # Characters and persons
    # -------------------------------------------------------------------------

    async def fetch_slim_character_by_id(
        self, id: int, allow_nsfw: bool = False
    ) -> res.SlimCharacter | None:
        return await self.entities.fetch_by_id(
            entities.SLIM_CHARACTER, id, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_slim_characters_by_ids(
        self, ids: Iterable[int], allow_nsfw: bool = False
    ) -> dict[int, res.SlimCharacter]:
        return await self.entities.fetch_by_ids(
            entities.SLIM_CHARACTER, ids, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_slim_person_by_id(
        self, id: int, allow_nsfw: bool = False
    ) -> res.SlimPerson | None:
        return await self.entities.fetch_by_id(
            entities.SLIM_PERSON, id, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_slim_persons_by_ids(
        self, ids: Iterable[int], allow_nsfw: bool = False
    ) -> dict[int, res.SlimPerson]:
        return await self.entities.fetch_by_ids(
            entities.SLIM_PERSON, ids, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_casts_by_subject_and_character_ids(
        self, subject_id: int, character_ids: Sequence[int], allow_nsfw: bool
    ) -> dict[int, list[res.SlimPerson]]:
        """Cast persons per character within one subject."""
        if not character_ids:
            return {}
        rows = await self.store.casts_by_subject_and_characters(
            subject_id, character_ids, allow_nsfw
        )
        result: dict[int, list[res.SlimPerson]] = defaultdict(list)
        for row in rows:
            result[row.character_id].append(convert.to_slim_person(row.person))
        return dict(result)

    async def fetch_casts_by_character_and_subject_ids(
        self, character_id: int, subject_ids: Sequence[int], allow_nsfw: bool
    ) -> dict[int, list[res.SlimPerson]]:
        """Cast persons of one character per subject."""
        if not subject_ids:
            return {}
        rows = await self.store.casts_by_character_and_subjects(
            character_id, subject_ids, allow_nsfw
        )
        result: dict[int, list[res.SlimPerson]] = defaultdict(list)
        for row in rows:
            result[row.subject_id].append(convert.to_slim_person(row.person))
        return dict(result)

    async def fetch_casts_by_person_and_character_ids(
        self,
        person_id: int,
        character_ids: Sequence[int],
        subject_type: int | None,
        relation_type: int | None,
        allow_nsfw: bool,
    ) -> dict[int, list[res.CharacterSubjectRelation]]:
        """Subjects in which a person plays each character."""
        if not character_ids:
            return {}
        rows = await self.store.casts_by_person_and_characters(
            person_id, character_ids, subject_type, relation_type, allow_nsfw
        )
        result: dict[int, list[res.CharacterSubjectRelation]] = defaultdict(list)
        for row in rows:
            result[row.character_id].append(convert.to_character_subject_relation(row))
        return dict(result)

    # -------------------------------------------------------------------------
    # Indexes, groups, blogs
    # -------------------------------------------------------------------------

    async def fetch_slim_index_by_id(self, index_id: int) -> res.SlimIndex | None:
        return await self.entities.fetch_by_id(entities.SLIM_INDEX, index_id)

    async def fetch_slim_group_by_name(
        self, group_name: str, allow_nsfw: bool = False
    ) -> res.SlimGroup | None:
        """Not cached: NSFW is filtered by the store query."""
        group = await self.store.get_group_by_name(group_name, allow_nsfw)
        if group is None:
            return None
        return convert.to_slim_group(group)

    async def fetch_slim_group_by_id(
        self, group_id: int, allow_nsfw: bool = False
    ) -> res.SlimGroup | None:
        return await self.entities.fetch_by_id(
            entities.SLIM_GROUP, group_id, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_slim_groups_by_ids(
        self, ids: Iterable[int], allow_nsfw: bool = False
    ) -> dict[int, res.SlimGroup]:
        return await self.entities.fetch_by_ids(
            entities.SLIM_GROUP, ids, VisibilityOptions(allow_nsfw=allow_nsfw)
        )

    async def fetch_group_topics_by_ids(self, ids: Iterable[int]) -> dict[int, res.Topic]:
        return await self.entities.fetch_by_ids(entities.GROUP_TOPIC, ids)

    async def fetch_slim_blog_entry_by_id(
        self, entry_id: int, uid: int
    ) -> res.SlimBlogEntry | None:
        """Fetch a blog entry as seen by user ``uid`` (0 for anonymous)."""
        return await self.entities.fetch_by_id(
            entities.SLIM_BLOG_ENTRY, entry_id, VisibilityOptions(viewer_id=uid)
        )
