"""Cache key schema for chii.

Key format: {prefix}:{entity_kind}:{variant}:{identifier}

Where:
- prefix: "chii" (namespace shared with other services on the same Redis)
- entity_kind: "user", "subject", "character", "person", "group", "blog", "index"
- variant: "slim", "item", "ep", "topic", "list", ...
- identifier: numeric id, or a digest of a list filter

Trending lists live under "chii:trending:..." and their locks under
"lock:<trending key>".
"""

from __future__ import annotations

import hashlib
import unicodedata

import orjson

from chii.core.types import SubjectFilter, SubjectSort, SubjectType, TrendingPeriod


def normalize_tag(name: str) -> str:
    """Normalize a tag name the way tag indexes are stored."""
    return unicodedata.normalize("NFKC", name)


def filter_digest(filter: SubjectFilter) -> str:
    """Stable digest of a subject filter.

    Field order, id order and tag order do not change the digest.
    """
    data = filter.model_dump(mode="json", exclude_none=True)
    if "ids" in data:
        data["ids"] = sorted(set(data["ids"]))
    if "tags" in data:
        data["tags"] = sorted({normalize_tag(t) for t in data["tags"]})
    return hashlib.md5(orjson.dumps(data, option=orjson.OPT_SORT_KEYS)).hexdigest()  # nosec B324


class CacheKeys:
    """Cache key generator following consistent naming convention."""

    PREFIX = "chii"
    LOCK_PREFIX = "lock"

    @classmethod
    def user_slim(cls, uid: int) -> str:
        return f"{cls.PREFIX}:user:slim:{uid}"

    @classmethod
    def subject_slim(cls, subject_id: int) -> str:
        return f"{cls.PREFIX}:subject:slim:{subject_id}"

    @classmethod
    def subject_item(cls, subject_id: int) -> str:
        """Key for the full subject record."""
        return f"{cls.PREFIX}:subject:item:{subject_id}"

    @classmethod
    def subject_ep(cls, episode_id: int) -> str:
        return f"{cls.PREFIX}:subject:ep:{episode_id}"

    @classmethod
    def subject_topic(cls, topic_id: int) -> str:
        return f"{cls.PREFIX}:subject:topic:{topic_id}"

    @classmethod
    def subject_list(cls, filter: SubjectFilter, sort: SubjectSort, page: int) -> str:
        """Key for one page of a filtered, sorted subject id list."""
        return f"{cls.PREFIX}:subject:list:{filter_digest(filter)}:{sort.value}:{page}"

    @classmethod
    def calendar(cls) -> str:
        return f"{cls.PREFIX}:subject:calendar"

    @classmethod
    def character_slim(cls, character_id: int) -> str:
        return f"{cls.PREFIX}:character:slim:{character_id}"

    @classmethod
    def person_slim(cls, person_id: int) -> str:
        return f"{cls.PREFIX}:person:slim:{person_id}"

    @classmethod
    def group_slim(cls, group_id: int) -> str:
        return f"{cls.PREFIX}:group:slim:{group_id}"

    @classmethod
    def group_topic(cls, topic_id: int) -> str:
        return f"{cls.PREFIX}:group:topic:{topic_id}"

    @classmethod
    def blog_slim(cls, entry_id: int) -> str:
        return f"{cls.PREFIX}:blog:slim:{entry_id}"

    @classmethod
    def index_slim(cls, index_id: int) -> str:
        return f"{cls.PREFIX}:index:slim:{index_id}"

    @classmethod
    def trending_subjects(cls, subject_type: SubjectType, period: TrendingPeriod | str) -> str:
        """Key for the ranked trending list of one subject type."""
        return f"{cls.PREFIX}:trending:subjects:{int(subject_type)}:{_period_value(period)}"

    @classmethod
    def trending_subject_topics(cls, period: TrendingPeriod | str) -> str:
        return f"{cls.PREFIX}:trending:subject_topics:{_period_value(period)}"

    @classmethod
    def lock(cls, target_key: str) -> str:
        """Key of the advisory lock guarding computation of ``target_key``."""
        return f"{cls.LOCK_PREFIX}:{target_key}"


def _period_value(period: TrendingPeriod | str) -> str:
    return period.value if isinstance(period, TrendingPeriod) else str(period)
