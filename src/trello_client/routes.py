"""Fixed REST routes and query-parameter enums for the Trello API."""

from __future__ import annotations

import string
from urllib.parse import quote
from enum import Enum, IntEnum
from typing import Tuple

BASE_URL = "https://api.trello.com/1/"
AVATAR_URL_TEMPLATE = "https://trello-avatars.s3.amazonaws.com/{hash}/{size}.png"


class Route(Enum):
    SEARCH = "search/"
    ALL_BOARDS = "members/me/boards/"
    BOARD = "boards/{board_id}/"
    LISTS = "boards/{board_id}/lists/"
    CARDS_FOR_LIST = "lists/{list_id}/cards/"
    MEMBER = "members/{member_id}/"
    MEMBERS_FOR_CARD = "cards/{card_id}/members/"

    @property
    def template(self) -> str:
        return self.value

    @property
    def params(self) -> Tuple[str, ...]:
        return tuple(
            name for _, name, _, _ in string.Formatter().parse(self.value) if name
        )

    def path(self, **params: str) -> str:
        missing = [name for name in self.params if not params.get(name)]
        if missing:
            raise ValueError(f"{self.name} requires {', '.join(missing)}.")
        return self.value.format(
            **{name: quote(str(params[name]), safe="") for name in self.params}
        )


class _WireEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class ListFilter(_WireEnum):
    ALL = "all"
    CLOSED = "closed"
    NONE = "none"
    OPEN = "open"


class CardFilter(_WireEnum):
    ALL = "all"
    CLOSED = "closed"
    NONE = "none"
    OPEN = "open"
    VISIBLE = "visible"


class MemberFilter(_WireEnum):
    ADMINS = "admins"
    ALL = "all"
    NONE = "none"
    NORMAL = "normal"
    OWNERS = "owners"


class AvatarSize(IntEnum):
    SMALL = 30
    LARGE = 170


def avatar_url(avatar_hash: str, size: AvatarSize = AvatarSize.LARGE) -> str:
    if not avatar_hash:
        raise ValueError("avatar_hash must be provided.")
    return AVATAR_URL_TEMPLATE.format(hash=avatar_hash, size=int(size))


__all__ = [
    "BASE_URL",
    "AVATAR_URL_TEMPLATE",
    "Route",
    "ListFilter",
    "CardFilter",
    "MemberFilter",
    "AvatarSize",
    "avatar_url",
]
