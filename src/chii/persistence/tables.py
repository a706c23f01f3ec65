"""SQLAlchemy ORM models for the tables the cache core reads.

Only the columns the fetchers, list queries and trending aggregates touch are
mapped. Timestamps are unix seconds, as stored by the rest of the system.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Float, Integer, SmallInteger, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserTable(Base):
    __tablename__ = "chii_members"

    id: Mapped[int] = mapped_column("uid", Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(15), nullable=False, index=True)
    nickname: Mapped[str] = mapped_column(String(30), nullable=False)
    avatar: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    sign: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    regdate: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class FriendTable(Base):
    __tablename__ = "chii_friends"

    uid: Mapped[int] = mapped_column("frd_uid", Integer, primary_key=True)
    fid: Mapped[int] = mapped_column("frd_fid", Integer, primary_key=True)
    dateline: Mapped[int] = mapped_column("frd_dateline", Integer, nullable=False, default=0)


class SubjectTable(Base):
    __tablename__ = "chii_subjects"

    id: Mapped[int] = mapped_column("subject_id", Integer, primary_key=True)
    type_id: Mapped[int] = mapped_column("subject_type_id", SmallInteger, nullable=False)
    name: Mapped[str] = mapped_column("subject_name", String(512), nullable=False)
    name_cn: Mapped[str] = mapped_column("subject_name_cn", String(512), nullable=False)
    platform: Mapped[int] = mapped_column("subject_platform", SmallInteger, nullable=False)
    infobox: Mapped[str] = mapped_column("field_infobox", Text, nullable=False, default="")
    summary: Mapped[str] = mapped_column("field_summary", Text, nullable=False, default="")
    image: Mapped[str] = mapped_column("subject_image", String(255), nullable=False, default="")
    eps: Mapped[int] = mapped_column("field_eps", Integer, nullable=False, default=0)
    volumes: Mapped[int] = mapped_column("field_volumes", Integer, nullable=False, default=0)
    collect: Mapped[int] = mapped_column("subject_collect", Integer, nullable=False, default=0)
    doing: Mapped[int] = mapped_column("subject_doing", Integer, nullable=False, default=0)
    series: Mapped[bool] = mapped_column("subject_series", Boolean, nullable=False, default=False)
    nsfw: Mapped[bool] = mapped_column("subject_nsfw", Boolean, nullable=False, default=False)
    ban: Mapped[int] = mapped_column("subject_ban", SmallInteger, nullable=False, default=0)


class SubjectFieldTable(Base):
    __tablename__ = "chii_subject_fields"

    id: Mapped[int] = mapped_column("field_sid", Integer, primary_key=True)
    rank: Mapped[int] = mapped_column("field_rank", Integer, nullable=False, default=0)
    rate_1: Mapped[int] = mapped_column("field_rate_1", Integer, nullable=False, default=0)
    rate_2: Mapped[int] = mapped_column("field_rate_2", Integer, nullable=False, default=0)
    rate_3: Mapped[int] = mapped_column("field_rate_3", Integer, nullable=False, default=0)
    rate_4: Mapped[int] = mapped_column("field_rate_4", Integer, nullable=False, default=0)
    rate_5: Mapped[int] = mapped_column("field_rate_5", Integer, nullable=False, default=0)
    rate_6: Mapped[int] = mapped_column("field_rate_6", Integer, nullable=False, default=0)
    rate_7: Mapped[int] = mapped_column("field_rate_7", Integer, nullable=False, default=0)
    rate_8: Mapped[int] = mapped_column("field_rate_8", Integer, nullable=False, default=0)
    rate_9: Mapped[int] = mapped_column("field_rate_9", Integer, nullable=False, default=0)
    rate_10: Mapped[int] = mapped_column("field_rate_10", Integer, nullable=False, default=0)
    date: Mapped[str | None] = mapped_column("field_date", String(10), nullable=True)
    year: Mapped[int] = mapped_column("field_year", SmallInteger, nullable=False, default=0)
    month: Mapped[int] = mapped_column("field_mon", SmallInteger, nullable=False, default=0)
    weekday: Mapped[int] = mapped_column("field_week_day", SmallInteger, nullable=False, default=0)
    redirect: Mapped[int] = mapped_column("field_redirect", Integer, nullable=False, default=0)
    locked: Mapped[bool] = mapped_column("field_lock", Boolean, nullable=False, default=False)


class SubjectInterestTable(Base):
    __tablename__ = "chii_subject_interests"

    id: Mapped[int] = mapped_column("interest_id", Integer, primary_key=True)
    uid: Mapped[int] = mapped_column("interest_uid", Integer, nullable=False, index=True)
    subject_id: Mapped[int] = mapped_column("interest_subject_id", Integer, nullable=False)
    subject_type: Mapped[int] = mapped_column("interest_subject_type", SmallInteger, nullable=False)
    type: Mapped[int] = mapped_column("interest_type", SmallInteger, nullable=False, default=0)
    rate: Mapped[int] = mapped_column("interest_rate", SmallInteger, nullable=False, default=0)
    comment: Mapped[str] = mapped_column("interest_comment", Text, nullable=False, default="")
    tag: Mapped[str] = mapped_column("interest_tag", Text, nullable=False, default="")
    ep_status: Mapped[int] = mapped_column("interest_ep_status", Integer, nullable=False, default=0)
    vol_status: Mapped[int] = mapped_column(
        "interest_vol_status", Integer, nullable=False, default=0
    )
    private: Mapped[bool] = mapped_column("interest_private", Boolean, nullable=False, default=False)
    doing_dateline: Mapped[int] = mapped_column(
        "interest_doing_dateline", Integer, nullable=False, default=0
    )
    updated_at: Mapped[int] = mapped_column("interest_lasttouch", Integer, nullable=False, default=0)


class EpisodeTable(Base):
    __tablename__ = "chii_episodes"

    id: Mapped[int] = mapped_column("ep_id", Integer, primary_key=True)
    subject_id: Mapped[int] = mapped_column("ep_subject_id", Integer, nullable=False, index=True)
    sort: Mapped[float] = mapped_column("ep_sort", Float, nullable=False, default=0)
    type: Mapped[int] = mapped_column("ep_type", SmallInteger, nullable=False, default=0)
    disc: Mapped[int] = mapped_column("ep_disc", SmallInteger, nullable=False, default=0)
    name: Mapped[str] = mapped_column("ep_name", String(80), nullable=False, default="")
    name_cn: Mapped[str] = mapped_column("ep_name_cn", String(80), nullable=False, default="")
    duration: Mapped[str] = mapped_column("ep_duration", String(80), nullable=False, default="")
    airdate: Mapped[str] = mapped_column("ep_airdate", String(80), nullable=False, default="")
    comment: Mapped[int] = mapped_column("ep_comment", Integer, nullable=False, default=0)
    desc: Mapped[str] = mapped_column("ep_desc", Text, nullable=False, default="")
    ban: Mapped[int] = mapped_column("ep_ban", SmallInteger, nullable=False, default=0)


class SubjectTopicTable(Base):
    __tablename__ = "chii_subject_topics"

    id: Mapped[int] = mapped_column("sbj_tpc_id", Integer, primary_key=True)
    subject_id: Mapped[int] = mapped_column("sbj_tpc_subject_id", Integer, nullable=False)
    uid: Mapped[int] = mapped_column("sbj_tpc_uid", Integer, nullable=False)
    title: Mapped[str] = mapped_column("sbj_tpc_title", String(80), nullable=False)
    dateline: Mapped[int] = mapped_column("sbj_tpc_dateline", Integer, nullable=False, default=0)
    lastpost: Mapped[int] = mapped_column("sbj_tpc_lastpost", Integer, nullable=False, default=0)
    replies: Mapped[int] = mapped_column("sbj_tpc_replies", Integer, nullable=False, default=0)
    state: Mapped[int] = mapped_column("sbj_tpc_state", SmallInteger, nullable=False, default=0)
    display: Mapped[int] = mapped_column("sbj_tpc_display", SmallInteger, nullable=False, default=1)


class SubjectPostTable(Base):
    __tablename__ = "chii_subject_posts"

    id: Mapped[int] = mapped_column("sbj_pst_id", Integer, primary_key=True)
    topic_id: Mapped[int] = mapped_column("sbj_pst_mid", Integer, nullable=False, index=True)
    uid: Mapped[int] = mapped_column("sbj_pst_uid", Integer, nullable=False)
    dateline: Mapped[int] = mapped_column("sbj_pst_dateline", Integer, nullable=False, default=0)
    state: Mapped[int] = mapped_column("sbj_pst_state", SmallInteger, nullable=False, default=0)


class GroupTable(Base):
    __tablename__ = "chii_groups"

    id: Mapped[int] = mapped_column("grp_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column("grp_name", String(50), nullable=False, index=True)
    title: Mapped[str] = mapped_column("grp_title", String(50), nullable=False)
    icon: Mapped[str] = mapped_column("grp_icon", String(255), nullable=False, default="")
    creator: Mapped[int] = mapped_column("grp_creator", Integer, nullable=False, default=0)
    members: Mapped[int] = mapped_column("grp_members", Integer, nullable=False, default=0)
    nsfw: Mapped[bool] = mapped_column("grp_nsfw", Boolean, nullable=False, default=False)
    accessible: Mapped[bool] = mapped_column(
        "grp_accessible", Boolean, nullable=False, default=True
    )
    created_at: Mapped[int] = mapped_column("grp_builddate", Integer, nullable=False, default=0)


class GroupTopicTable(Base):
    __tablename__ = "chii_group_topics"

    id: Mapped[int] = mapped_column("grp_tpc_id", Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column("grp_tpc_gid", Integer, nullable=False)
    uid: Mapped[int] = mapped_column("grp_tpc_uid", Integer, nullable=False)
    title: Mapped[str] = mapped_column("grp_tpc_title", String(80), nullable=False)
    dateline: Mapped[int] = mapped_column("grp_tpc_dateline", Integer, nullable=False, default=0)
    lastpost: Mapped[int] = mapped_column("grp_tpc_lastpost", Integer, nullable=False, default=0)
    replies: Mapped[int] = mapped_column("grp_tpc_replies", Integer, nullable=False, default=0)
    state: Mapped[int] = mapped_column("grp_tpc_state", SmallInteger, nullable=False, default=0)
    display: Mapped[int] = mapped_column("grp_tpc_display", SmallInteger, nullable=False, default=1)


class CharacterTable(Base):
    __tablename__ = "chii_characters"

    id: Mapped[int] = mapped_column("crt_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column("crt_name", String(255), nullable=False)
    role: Mapped[int] = mapped_column("crt_role", SmallInteger, nullable=False, default=1)
    image: Mapped[str] = mapped_column("crt_img", String(255), nullable=False, default="")
    comment: Mapped[int] = mapped_column("crt_comment", Integer, nullable=False, default=0)
    nsfw: Mapped[bool] = mapped_column("crt_nsfw", Boolean, nullable=False, default=False)
    ban: Mapped[int] = mapped_column("crt_ban", SmallInteger, nullable=False, default=0)
    lock: Mapped[bool] = mapped_column("crt_lock", Boolean, nullable=False, default=False)


class PersonTable(Base):
    __tablename__ = "chii_persons"

    id: Mapped[int] = mapped_column("prsn_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column("prsn_name", String(255), nullable=False)
    type: Mapped[int] = mapped_column("prsn_type", SmallInteger, nullable=False, default=1)
    image: Mapped[str] = mapped_column("prsn_img", String(255), nullable=False, default="")
    producer: Mapped[bool] = mapped_column("prsn_producer", Boolean, nullable=False, default=False)
    mangaka: Mapped[bool] = mapped_column("prsn_mangaka", Boolean, nullable=False, default=False)
    artist: Mapped[bool] = mapped_column("prsn_artist", Boolean, nullable=False, default=False)
    seiyu: Mapped[bool] = mapped_column("prsn_seiyu", Boolean, nullable=False, default=False)
    writer: Mapped[bool] = mapped_column("prsn_writer", Boolean, nullable=False, default=False)
    illustrator: Mapped[bool] = mapped_column(
        "prsn_illustrator", Boolean, nullable=False, default=False
    )
    actor: Mapped[bool] = mapped_column("prsn_actor", Boolean, nullable=False, default=False)
    comment: Mapped[int] = mapped_column("prsn_comment", Integer, nullable=False, default=0)
    nsfw: Mapped[bool] = mapped_column("prsn_nsfw", Boolean, nullable=False, default=False)
    ban: Mapped[int] = mapped_column("prsn_ban", SmallInteger, nullable=False, default=0)
    lock: Mapped[bool] = mapped_column("prsn_lock", Boolean, nullable=False, default=False)


class CharacterCastTable(Base):
    __tablename__ = "chii_crt_cast_index"

    character_id: Mapped[int] = mapped_column("crt_id", Integer, primary_key=True)
    person_id: Mapped[int] = mapped_column("prsn_id", Integer, primary_key=True)
    subject_id: Mapped[int] = mapped_column("subject_id", Integer, primary_key=True)
    subject_type: Mapped[int] = mapped_column("subject_type_id", SmallInteger, nullable=False)
    summary: Mapped[str] = mapped_column("summary", String(255), nullable=False, default="")


class CharacterSubjectTable(Base):
    __tablename__ = "chii_crt_subject_index"

    character_id: Mapped[int] = mapped_column("crt_id", Integer, primary_key=True)
    subject_id: Mapped[int] = mapped_column("subject_id", Integer, primary_key=True)
    subject_type: Mapped[int] = mapped_column("subject_type_id", SmallInteger, nullable=False)
    type: Mapped[int] = mapped_column("crt_type", SmallInteger, nullable=False, default=0)
    order: Mapped[int] = mapped_column("crt_order", SmallInteger, nullable=False, default=0)


class BlogEntryTable(Base):
    __tablename__ = "chii_blog_entry"

    id: Mapped[int] = mapped_column("entry_id", Integer, primary_key=True)
    uid: Mapped[int] = mapped_column("entry_uid", Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column("entry_title", String(80), nullable=False)
    icon: Mapped[str] = mapped_column("entry_icon", String(255), nullable=False, default="")
    content: Mapped[str] = mapped_column("entry_content", Text, nullable=False, default="")
    replies: Mapped[int] = mapped_column("entry_replies", Integer, nullable=False, default=0)
    type: Mapped[int] = mapped_column("entry_type", SmallInteger, nullable=False, default=0)
    public: Mapped[bool] = mapped_column("entry_public", Boolean, nullable=False, default=True)
    dateline: Mapped[int] = mapped_column("entry_dateline", Integer, nullable=False, default=0)
    lastpost: Mapped[int] = mapped_column("entry_lastpost", Integer, nullable=False, default=0)


class IndexTable(Base):
    __tablename__ = "chii_index"

    id: Mapped[int] = mapped_column("idx_id", Integer, primary_key=True)
    uid: Mapped[int] = mapped_column("idx_uid", Integer, nullable=False)
    title: Mapped[str] = mapped_column("idx_title", String(80), nullable=False)
    private: Mapped[bool] = mapped_column("idx_private", Boolean, nullable=False, default=False)
    total: Mapped[int] = mapped_column("idx_subject_total", Integer, nullable=False, default=0)
    stats: Mapped[str] = mapped_column("idx_stats", Text, nullable=False, default="")
    ban: Mapped[int] = mapped_column("idx_ban", SmallInteger, nullable=False, default=0)
    dateline: Mapped[int] = mapped_column("idx_dateline", Integer, nullable=False, default=0)
    lasttouch: Mapped[int] = mapped_column("idx_lasttouch", Integer, nullable=False, default=0)


class TagIndexTable(Base):
    __tablename__ = "chii_tag_neue_index"

    id: Mapped[int] = mapped_column("tag_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column("tag_name", String(30), nullable=False, index=True)
    cat: Mapped[int] = mapped_column("tag_cat", SmallInteger, nullable=False)
    type: Mapped[int] = mapped_column("tag_type", SmallInteger, nullable=False)
    results: Mapped[int] = mapped_column("tag_results", Integer, nullable=False, default=0)


class TagListTable(Base):
    __tablename__ = "chii_tag_neue_list"

    tag_id: Mapped[int] = mapped_column("tlt_tid", Integer, primary_key=True)
    uid: Mapped[int] = mapped_column("tlt_uid", Integer, primary_key=True)
    main_id: Mapped[int] = mapped_column("tlt_mid", Integer, primary_key=True)
    cat: Mapped[int] = mapped_column("tlt_cat", SmallInteger, nullable=False)
    type: Mapped[int] = mapped_column("tlt_type", SmallInteger, nullable=False)
