"""Cached entity kinds."""

from __future__ import annotations

from chii.cache.keys import CacheKeys
from chii.core import convert
from chii.core import model as res
from chii.fetcher.entity import ONE_DAY, CacheableEntity, Gate
from chii.persistence.rows import SubjectRow
from chii.persistence.store import EntityKind
from chii.persistence.tables import (
    BlogEntryTable,
    CharacterTable,
    EpisodeTable,
    GroupTable,
    GroupTopicTable,
    IndexTable,
    PersonTable,
    SubjectTopicTable,
    UserTable,
)

SLIM_USER: CacheableEntity[UserTable, res.SlimUser] = CacheableEntity(
    kind=EntityKind.USER,
    model=res.SlimUser,
    key=CacheKeys.user_slim,
    convert=convert.to_slim_user,
)

SLIM_SUBJECT: CacheableEntity[SubjectRow, res.SlimSubject] = CacheableEntity(
    kind=EntityKind.SUBJECT,
    model=res.SlimSubject,
    key=CacheKeys.subject_slim,
    convert=convert.to_slim_subject,
    exclude_banned=True,
    gate=Gate.NSFW,
)

SUBJECT: CacheableEntity[SubjectRow, res.Subject] = CacheableEntity(
    kind=EntityKind.SUBJECT,
    model=res.Subject,
    key=CacheKeys.subject_item,
    convert=convert.to_subject,
    exclude_banned=True,
    gate=Gate.NSFW,
)

EPISODE: CacheableEntity[EpisodeTable, res.Episode] = CacheableEntity(
    kind=EntityKind.EPISODE,
    model=res.Episode,
    key=CacheKeys.subject_ep,
    convert=convert.to_episode,
    exclude_banned=True,
)

SUBJECT_TOPIC: CacheableEntity[SubjectTopicTable, res.Topic] = CacheableEntity(
    kind=EntityKind.SUBJECT_TOPIC,
    model=res.Topic,
    key=CacheKeys.subject_topic,
    convert=convert.to_subject_topic,
    ttl=ONE_DAY,
)

SLIM_CHARACTER: CacheableEntity[CharacterTable, res.SlimCharacter] = CacheableEntity(
    kind=EntityKind.CHARACTER,
    model=res.SlimCharacter,
    key=CacheKeys.character_slim,
    convert=convert.to_slim_character,
    exclude_banned=True,
    gate=Gate.NSFW,
)

SLIM_PERSON: CacheableEntity[PersonTable, res.SlimPerson] = CacheableEntity(
    kind=EntityKind.PERSON,
    model=res.SlimPerson,
    key=CacheKeys.person_slim,
    convert=convert.to_slim_person,
    exclude_banned=True,
    gate=Gate.NSFW,
)

SLIM_GROUP: CacheableEntity[GroupTable, res.SlimGroup] = CacheableEntity(
    kind=EntityKind.GROUP,
    model=res.SlimGroup,
    key=CacheKeys.group_slim,
    convert=convert.to_slim_group,
    gate=Gate.NSFW,
)

GROUP_TOPIC: CacheableEntity[GroupTopicTable, res.Topic] = CacheableEntity(
    kind=EntityKind.GROUP_TOPIC,
    model=res.Topic,
    key=CacheKeys.group_topic,
    convert=convert.to_group_topic,
    ttl=ONE_DAY,
)

SLIM_INDEX: CacheableEntity[IndexTable, res.SlimIndex] = CacheableEntity(
    kind=EntityKind.INDEX,
    model=res.SlimIndex,
    key=CacheKeys.index_slim,
    convert=convert.to_slim_index,
    exclude_banned=True,
)

SLIM_BLOG_ENTRY: CacheableEntity[BlogEntryTable, res.SlimBlogEntry] = CacheableEntity(
    kind=EntityKind.BLOG_ENTRY,
    model=res.SlimBlogEntry,
    key=CacheKeys.blog_slim,
    convert=convert.to_slim_blog_entry,
    gate=Gate.PRIVACY,
)
