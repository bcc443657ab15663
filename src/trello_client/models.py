"""
Immutable Trello records.

Records are only built by ``decode``: each field is resolved in declaration
order and the first failure aborts the whole record, so callers never see a
partially populated instance. Optional fields are ``None`` when absent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from . import decoding as d
from .decoding import JSONValue
from .routes import AvatarSize, avatar_url

Number = Union[int, float]


def _tuple(items):
    return None if items is None else tuple(items)


class Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Label(Record):
    id: str
    name: Optional[str] = None
    color: Optional[str] = None
    board_id: Optional[str] = None

    @classmethod
    def decode(cls, json: JSONValue) -> "Label":
        obj = d.expect_object(json)
        return cls(
            id=d.required_str(obj, "id", non_empty=True),
            # unnamed labels come back as "" or without the key
            name=d.optional_str(obj, "name"),
            color=d.optional_str(obj, "color"),
            board_id=d.optional_str(obj, "idBoard"),
        )


class Member(Record):
    id: str
    username: str
    full_name: Optional[str] = None
    initials: Optional[str] = None
    avatar_hash: Optional[str] = None
    bio: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def decode(cls, json: JSONValue) -> "Member":
        obj = d.expect_object(json)
        return cls(
            id=d.required_str(obj, "id", non_empty=True),
            username=d.required_str(obj, "username"),
            full_name=d.optional_str(obj, "fullName"),
            initials=d.optional_str(obj, "initials"),
            avatar_hash=d.optional_str(obj, "avatarHash"),
            bio=d.optional_str(obj, "bio"),
            url=d.optional_str(obj, "url"),
        )

    @property
    def has_avatar(self) -> bool:
        return bool(self.avatar_hash)

    def avatar_url(self, size: AvatarSize = AvatarSize.LARGE) -> Optional[str]:
        if not self.avatar_hash:
            return None
        return avatar_url(self.avatar_hash, size)


class CardList(Record):
    id: str
    name: str
    closed: Optional[bool] = None
    board_id: Optional[str] = None
    position: Optional[Number] = None

    @classmethod
    def decode(cls, json: JSONValue) -> "CardList":
        obj = d.expect_object(json)
        return cls(
            id=d.required_str(obj, "id", non_empty=True),
            name=d.required_str(obj, "name"),
            closed=d.optional_bool(obj, "closed"),
            board_id=d.optional_str(obj, "idBoard"),
            position=d.optional_number(obj, "pos"),
        )


class Card(Record):
    id: str
    name: str
    description: Optional[str] = None
    closed: Optional[bool] = None
    position: Optional[Number] = None
    due_date: Optional[datetime] = None
    list_id: Optional[str] = None
    member_ids: Optional[Tuple[str, ...]] = None
    board_id: Optional[str] = None
    short_url: Optional[str] = None
    labels: Optional[Tuple[Label, ...]] = None

    @classmethod
    def decode(cls, json: JSONValue) -> "Card":
        obj = d.expect_object(json)
        return cls(
            id=d.required_str(obj, "id", non_empty=True),
            name=d.required_str(obj, "name"),
            description=d.optional_str(obj, "desc"),
            closed=d.optional_bool(obj, "closed"),
            position=d.optional_number(obj, "pos"),
            due_date=d.optional_date(obj, "due"),
            list_id=d.optional_str(obj, "idList"),
            member_ids=_tuple(d.optional_str_list(obj, "idMembers")),
            board_id=d.optional_str(obj, "idBoard"),
            short_url=d.optional_str(obj, "shortUrl"),
            labels=_tuple(d.optional_record_list(obj, "labels", Label.decode)),
        )


class Board(Record):
    id: str
    name: str
    description: Optional[str] = None
    closed: Optional[bool] = None
    lists: Optional[Tuple[CardList, ...]] = None
    cards: Optional[Tuple[Card, ...]] = None
    organization_id: Optional[str] = None
    url: Optional[str] = None
    short_url: Optional[str] = None

    @classmethod
    def decode(cls, json: JSONValue) -> "Board":
        obj = d.expect_object(json)
        return cls(
            id=d.required_str(obj, "id", non_empty=True),
            name=d.required_str(obj, "name"),
            description=d.optional_str(obj, "desc"),
            closed=d.optional_bool(obj, "closed"),
            lists=_tuple(d.optional_record_list(obj, "lists", CardList.decode)),
            cards=_tuple(d.optional_record_list(obj, "cards", Card.decode)),
            organization_id=d.optional_str(obj, "idOrganization"),
            url=d.optional_str(obj, "url"),
            short_url=d.optional_str(obj, "shortUrl"),
        )

    def sorted_lists(self) -> Tuple[CardList, ...]:
        """Lists ordered by position; lists without a position go last."""
        return tuple(
            sorted(
                self.lists or (),
                key=lambda lst: (lst.position is None, lst.position or 0),
            )
        )


__all__ = ["Record", "Label", "Member", "CardList", "Card", "Board"]
