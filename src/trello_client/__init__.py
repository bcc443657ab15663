"""trello_client package exports."""

from .client import RetryConfig, TrelloClient
from .config import create_client_from_env, load_env_config
from .decoding import format_date, parse_date, to_local
from .errors import (
    DecodeError,
    InvalidDateFormat,
    MissingKey,
    TransportError,
    TrelloError,
    TypeMismatch,
)
from .models import Board, Card, CardList, Label, Member
from .logging import setup_logging
from .result import Failure, Result, Success
from .routes import (
    AvatarSize,
    CardFilter,
    ListFilter,
    MemberFilter,
    Route,
    avatar_url,
)

__all__ = [
    # Client
    "TrelloClient",
    "RetryConfig",
    # Config helpers
    "create_client_from_env",
    "load_env_config",
    # Records
    "Board",
    "Card",
    "CardList",
    "Label",
    "Member",
    # Result
    "Result",
    "Success",
    "Failure",
    # Exceptions
    "TrelloError",
    "TransportError",
    "DecodeError",
    "MissingKey",
    "TypeMismatch",
    "InvalidDateFormat",
    # Logging
    "setup_logging",
    # Dates
    "parse_date",
    "format_date",
    "to_local",
    # Routes
    "Route",
    "ListFilter",
    "CardFilter",
    "MemberFilter",
    "AvatarSize",
    "avatar_url",
]
