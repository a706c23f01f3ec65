"""Response-shaped records.

These are what the cache stores: every fetcher converts a store row into one
of these models and serializes it with orjson. Records keep their ``nsfw``
and ``public`` flags so readers can re-apply visibility rules per request.
"""

from __future__ import annotations

from typing import Generic, TypeVar

import orjson
from pydantic import BaseModel, Field

T = TypeVar("T")


class Record(BaseModel):
    """Base model for cached records; ignores unknown fields from older payloads."""

    model_config = {
        "extra": "ignore",
        "populate_by_name": True,
    }

    def to_bytes(self) -> bytes:
        return orjson.dumps(self.model_dump(mode="json", by_alias=True))

    @classmethod
    def from_bytes(cls: type[R], payload: bytes | str) -> R:
        return cls.model_validate(orjson.loads(payload))


R = TypeVar("R", bound=Record)


class Avatar(Record):
    small: str
    medium: str
    large: str


class SlimUser(Record):
    id: int
    username: str
    nickname: str
    avatar: Avatar
    sign: str = ""
    joined_at: int = Field(default=0, alias="joinedAt")


class SimpleUser(Record):
    id: int
    username: str
    nickname: str


class SubjectImages(Record):
    large: str
    common: str
    medium: str
    small: str
    grid: str


class SubjectRating(Record):
    rank: int
    total: int
    count: list[int]
    score: float


class SlimSubject(Record):
    id: int
    name: str
    name_cn: str = Field(alias="nameCN")
    type: int
    info: str = ""
    rating: SubjectRating
    locked: bool
    nsfw: bool
    images: SubjectImages | None = None


class Subject(SlimSubject):
    infobox: str = ""
    platform: int = 0
    summary: str = ""
    series: bool = False
    volumes: int = 0
    eps: int = 0
    collects: int = 0
    date: str | None = None
    year: int = 0
    month: int = 0
    weekday: int = 0
    redirect: int = 0


class Episode(Record):
    id: int
    subject_id: int = Field(alias="subjectID")
    sort: float
    type: int
    disc: int
    name: str
    name_cn: str = Field(alias="nameCN")
    duration: str
    airdate: str
    comment: int
    desc: str = ""


class Topic(Record):
    id: int
    parent_id: int = Field(alias="parentID")
    creator_id: int = Field(alias="creatorID")
    title: str
    replies: int
    state: int
    display: int
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")


class SlimCharacter(Record):
    id: int
    name: str
    role: int
    images: dict[str, str] | None = None
    comment: int
    nsfw: bool
    lock: bool


class SlimPerson(Record):
    id: int
    name: str
    type: int
    career: list[str]
    images: dict[str, str] | None = None
    comment: int
    nsfw: bool
    lock: bool


class SlimGroup(Record):
    id: int
    name: str
    nsfw: bool
    title: str
    icon: str
    creator_id: int = Field(alias="creatorID")
    members: int
    created_at: int = Field(alias="createdAt")
    accessible: bool


class SlimBlogEntry(Record):
    id: int
    uid: int
    title: str
    icon: str = ""
    summary: str
    replies: int
    type: int
    public: bool
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")


class SlimIndex(Record):
    id: int
    uid: int
    title: str
    private: bool
    total: int
    stats: dict[str, int]
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")


class SubjectInterest(Record):
    rate: int
    type: int
    comment: str
    tags: list[str]
    ep_status: int = Field(alias="epStatus")
    vol_status: int = Field(alias="volStatus")
    private: bool
    updated_at: int = Field(alias="updatedAt")


class CharacterSubjectRelation(Record):
    subject: SlimSubject
    type: int
    order: int


class CalendarItem(Record):
    id: int
    weekday: int
    watchers: int


class TrendingItem(Record):
    id: int
    total: int


class Paged(BaseModel, Generic[T]):
    """One page of results; ``total`` describes the whole result set."""

    data: list[T]
    total: int

    def to_bytes(self) -> bytes:
        return orjson.dumps(self.model_dump(mode="json", by_alias=True))
