"""Conversion from store rows to cached response records.

Every function here is total over its row type: missing optional columns map
to defaults, never to errors.
"""

from __future__ import annotations

import logging

import orjson

from chii.core import model as res
from chii.persistence.rows import CastRelationRow, SubjectRow
from chii.persistence.tables import (
    BlogEntryTable,
    CharacterTable,
    EpisodeTable,
    GroupTable,
    GroupTopicTable,
    IndexTable,
    PersonTable,
    SubjectInterestTable,
    SubjectTopicTable,
    UserTable,
)

logger = logging.getLogger(__name__)

DEFAULT_AVATAR = "icon.jpg"
BLOG_SUMMARY_LENGTH = 120

_CAREERS = ("producer", "mangaka", "artist", "seiyu", "writer", "illustrator", "actor")


def _avatar(path: str) -> res.Avatar:
    path = path or DEFAULT_AVATAR
    return res.Avatar(
        small=f"/pic/user/s/{path}",
        medium=f"/pic/user/m/{path}",
        large=f"/pic/user/l/{path}",
    )


def _crt_images(path: str, prefix: str) -> dict[str, str] | None:
    if not path:
        return None
    return {
        "large": f"/pic/{prefix}/l/{path}",
        "medium": f"/pic/{prefix}/m/{path}",
        "small": f"/pic/{prefix}/s/{path}",
        "grid": f"/pic/{prefix}/g/{path}",
    }


def _subject_images(path: str) -> res.SubjectImages | None:
    if not path:
        return None
    return res.SubjectImages(
        large=f"/pic/cover/l/{path}",
        common=f"/pic/cover/c/{path}",
        medium=f"/pic/cover/m/{path}",
        small=f"/pic/cover/s/{path}",
        grid=f"/pic/cover/g/{path}",
    )


def to_slim_user(user: UserTable) -> res.SlimUser:
    return res.SlimUser(
        id=user.id,
        username=user.username,
        nickname=user.nickname,
        avatar=_avatar(user.avatar),
        sign=user.sign,
        joined_at=user.regdate,
    )


def to_simple_user(user: res.SlimUser) -> res.SimpleUser:
    return res.SimpleUser(id=user.id, username=user.username, nickname=user.nickname)


def to_subject_rating(row: SubjectRow) -> res.SubjectRating:
    f = row.fields
    count = [
        f.rate_1,
        f.rate_2,
        f.rate_3,
        f.rate_4,
        f.rate_5,
        f.rate_6,
        f.rate_7,
        f.rate_8,
        f.rate_9,
        f.rate_10,
    ]
    total = sum(count)
    score = round(sum((i + 1) * c for i, c in enumerate(count)) / total, 1) if total else 0.0
    return res.SubjectRating(rank=f.rank, total=total, count=count, score=score)


def _subject_info(row: SubjectRow) -> str:
    parts = []
    if row.subject.eps:
        parts.append(f"{row.subject.eps}话")
    if row.fields.date:
        parts.append(row.fields.date)
    return " / ".join(parts)


def to_slim_subject(row: SubjectRow) -> res.SlimSubject:
    s = row.subject
    return res.SlimSubject(
        id=s.id,
        name=s.name,
        name_cn=s.name_cn,
        type=s.type_id,
        info=_subject_info(row),
        rating=to_subject_rating(row),
        locked=row.fields.locked,
        nsfw=s.nsfw,
        images=_subject_images(s.image),
    )


def to_subject(row: SubjectRow) -> res.Subject:
    s, f = row.subject, row.fields
    slim = to_slim_subject(row)
    return res.Subject(
        **slim.model_dump(),
        infobox=s.infobox,
        platform=s.platform,
        summary=s.summary,
        series=s.series,
        volumes=s.volumes,
        eps=s.eps,
        collects=s.collect,
        date=f.date,
        year=f.year,
        month=f.month,
        weekday=f.weekday,
        redirect=f.redirect,
    )


def to_episode(ep: EpisodeTable) -> res.Episode:
    return res.Episode(
        id=ep.id,
        subject_id=ep.subject_id,
        sort=ep.sort,
        type=ep.type,
        disc=ep.disc,
        name=ep.name,
        name_cn=ep.name_cn,
        duration=ep.duration,
        airdate=ep.airdate,
        comment=ep.comment,
        desc=ep.desc,
    )


def to_subject_topic(topic: SubjectTopicTable) -> res.Topic:
    return res.Topic(
        id=topic.id,
        parent_id=topic.subject_id,
        creator_id=topic.uid,
        title=topic.title,
        replies=topic.replies,
        state=topic.state,
        display=topic.display,
        created_at=topic.dateline,
        updated_at=topic.lastpost,
    )


def to_group_topic(topic: GroupTopicTable) -> res.Topic:
    return res.Topic(
        id=topic.id,
        parent_id=topic.group_id,
        creator_id=topic.uid,
        title=topic.title,
        replies=topic.replies,
        state=topic.state,
        display=topic.display,
        created_at=topic.dateline,
        updated_at=topic.lastpost,
    )


def to_slim_character(character: CharacterTable) -> res.SlimCharacter:
    return res.SlimCharacter(
        id=character.id,
        name=character.name,
        role=character.role,
        images=_crt_images(character.image, "crt"),
        comment=character.comment,
        nsfw=character.nsfw,
        lock=character.lock,
    )


def to_slim_person(person: PersonTable) -> res.SlimPerson:
    return res.SlimPerson(
        id=person.id,
        name=person.name,
        type=person.type,
        career=[c for c in _CAREERS if getattr(person, c)],
        images=_crt_images(person.image, "crt"),
        comment=person.comment,
        nsfw=person.nsfw,
        lock=person.lock,
    )


def to_slim_group(group: GroupTable) -> res.SlimGroup:
    return res.SlimGroup(
        id=group.id,
        name=group.name,
        nsfw=group.nsfw,
        title=group.title,
        icon=f"/pic/icon/l/{group.icon}" if group.icon else "",
        creator_id=group.creator,
        members=group.members,
        created_at=group.created_at,
        accessible=group.accessible,
    )


def to_slim_blog_entry(entry: BlogEntryTable) -> res.SlimBlogEntry:
    return res.SlimBlogEntry(
        id=entry.id,
        uid=entry.uid,
        title=entry.title,
        icon=entry.icon,
        summary=entry.content[:BLOG_SUMMARY_LENGTH],
        replies=entry.replies,
        type=entry.type,
        public=entry.public,
        created_at=entry.dateline,
        updated_at=entry.lastpost,
    )


def _index_stats(raw: str, index_id: int) -> dict[str, int]:
    if not raw:
        return {}
    try:
        stats = orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.warning(f"Index {index_id} has undecodable stats, using empty stats")
        return {}
    if not isinstance(stats, dict):
        return {}
    return {str(k): int(v) for k, v in stats.items()}


def to_slim_index(index: IndexTable) -> res.SlimIndex:
    return res.SlimIndex(
        id=index.id,
        uid=index.uid,
        title=index.title,
        private=index.private,
        total=index.total,
        stats=_index_stats(index.stats, index.id),
        created_at=index.dateline,
        updated_at=index.lasttouch,
    )


def to_subject_interest(interest: SubjectInterestTable) -> res.SubjectInterest:
    return res.SubjectInterest(
        rate=interest.rate,
        type=interest.type,
        comment=interest.comment,
        tags=[t for t in interest.tag.split(" ") if t],
        ep_status=interest.ep_status,
        vol_status=interest.vol_status,
        private=interest.private,
        updated_at=interest.updated_at,
    )


def to_character_subject_relation(row: CastRelationRow) -> res.CharacterSubjectRelation:
    return res.CharacterSubjectRelation(
        subject=to_slim_subject(SubjectRow(subject=row.subject, fields=row.fields)),
        type=row.relation.type,
        order=row.relation.order,
    )
