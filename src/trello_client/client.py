import asyncio
import logging
import os
import time
from dataclasses import dataclass
from io import BytesIO
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

import httpx
from dotenv import load_dotenv
from PIL import Image, UnidentifiedImageError

from .decoding import Decoder, JSONValue, decode_list
from .errors import DecodeError, TransportError
from .models import Board, Card, CardList, Member
from .observability import log_event
from .result import Failure, Result, Success
from .routes import (
    BASE_URL,
    AvatarSize,
    CardFilter,
    ListFilter,
    MemberFilter,
    Route,
    avatar_url,
)

T = TypeVar("T")

QueryValue = Union[str, int, float, bool]
Completion = Callable[[Result[T]], None]


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 2  # total extra attempts
    backoff_base_seconds: float = 0.3  # 0.3, 0.6, 1.2...
    retry_statuses: frozenset[int] = frozenset({502, 503, 504})
    retry_on_429: bool = False


class TrelloClient:
    """
    Async client for the Trello REST API.
    - Appends the API key and auth token to every request
    - Handles base URL, timeouts, retries
    - Every public operation resolves exactly once to a Success or Failure
    """

    def __init__(
        self,
        *,
        api_key: str,
        auth_token: str,
        base_url: str = BASE_URL,
        timeout_seconds: float = 10.0,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        api_key = api_key or ""
        auth_token = auth_token or ""
        base_url = (base_url or "").rstrip("/") + "/"

        if not api_key:
            raise ValueError("api_key must be provided.")
        if not auth_token:
            raise ValueError("auth_token must be provided.")

        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.retry = retry if retry is not None else RetryConfig()
        self.log = logger or logging.getLogger("trello_client.client")
        self._auth_params: Mapping[str, str] = MappingProxyType(
            {"key": api_key, "token": auth_token}
        )

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout_seconds,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "TrelloClient":
        load_dotenv()
        api_key = os.getenv("TRELLO_API_KEY", "").strip()
        auth_token = os.getenv("TRELLO_AUTH_TOKEN", "").strip()
        return cls(api_key=api_key, auth_token=auth_token, **kwargs)

    @property
    def auth_params(self) -> Mapping[str, str]:
        return self._auth_params

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "TrelloClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- Transport --------------------------------------------------------- #

    def _query(self, params: Optional[Dict[str, QueryValue]]) -> Dict[str, Any]:
        query: Dict[str, Any] = dict(params or {})
        query.update(self._auth_params)
        return query

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]],
        endpoint: str,
        operation: Optional[str],
    ) -> httpx.Response:
        """
        Issue one logical request.
        - Retries on transient failures (network/timeouts + 502/503/504; optionally 429)
        - Raises TransportError on network/timeout errors after retries
        """
        start = time.perf_counter()
        attempt = 0

        while True:
            try:
                resp = await self.http.request(method, url, params=params)
            except (httpx.ConnectError, httpx.ReadTimeout, httpx.ConnectTimeout) as exc:
                if attempt < self.retry.max_retries:
                    await asyncio.sleep(self.retry.backoff_base_seconds * (2**attempt))
                    attempt += 1
                    continue
                self._log_call(operation, method, endpoint, start, attempt, exc=exc)
                raise TransportError(
                    f"Network/timeout error calling {method} {endpoint}: {exc}",
                    method=method,
                    url=endpoint,
                    cause=exc,
                ) from exc
            except httpx.HTTPError as exc:
                # Other httpx exceptions (rare) - do not blindly retry
                self._log_call(operation, method, endpoint, start, attempt, exc=exc)
                raise TransportError(
                    f"HTTPX error calling {method} {endpoint}: {exc}",
                    method=method,
                    url=endpoint,
                    cause=exc,
                ) from exc

            if resp.status_code in self.retry.retry_statuses or (
                self.retry.retry_on_429 and resp.status_code == 429
            ):
                if attempt < self.retry.max_retries:
                    await asyncio.sleep(self.retry.backoff_base_seconds * (2**attempt))
                    attempt += 1
                    continue

            self._log_call(
                operation, method, endpoint, start, attempt, status=resp.status_code
            )

            if resp.status_code < 200 or resp.status_code >= 300:
                raise TransportError(
                    f"{resp.status_code} {method} {endpoint}: request failed",
                    method=method,
                    url=endpoint,
                    status_code=resp.status_code,
                    response_text=(resp.text or "")[:500],
                )
            return resp

    def _log_call(
        self,
        operation: Optional[str],
        method: str,
        endpoint: str,
        start: float,
        attempt: int,
        *,
        status: Optional[int] = None,
        exc: Optional[BaseException] = None,
    ) -> None:
        # endpoint only: the full URL carries the auth token
        fields: Dict[str, Any] = {
            "operation": operation,
            "method": method,
            "endpoint": endpoint,
            "status": status if exc is None else "exception",
            "duration_ms": int((time.perf_counter() - start) * 1000),
            "attempt": attempt,
        }
        if exc is not None:
            fields["error_type"] = type(exc).__name__
        log_event("trello_call", self.log, **fields)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, QueryValue]] = None,
        operation: Optional[str] = None,
    ) -> JSONValue:
        """
        Core request method.
        - Raises TransportError on non-2xx HTTP responses and network failures
        - Raises TransportError if the body is empty or isn't valid JSON
        - Returns the parsed JSON body (object or array) on success
        """
        method = method.upper()
        resp = await self._send(
            method,
            path,
            params=self._query(params),
            endpoint=path,
            operation=operation,
        )

        if not resp.content:
            raise TransportError(
                f"Empty response body from {method} {path}",
                method=method,
                url=path,
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise TransportError(
                f"Expected JSON from {method} {path}, got non-JSON body snippet: "
                f"{snippet!r}",
                method=method,
                url=path,
                status_code=resp.status_code,
                response_text=snippet,
                cause=exc,
            ) from exc

    async def fetch_image(
        self, url: str, *, operation: Optional[str] = None
    ) -> Image.Image:
        """Download and decode an image. Credentials are not sent."""
        resp = await self._send(
            "GET", url, params=None, endpoint=url, operation=operation
        )
        try:
            image = Image.open(BytesIO(resp.content))
            image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as exc:
            raise TransportError(
                f"Could not decode image from {url}: {exc}",
                method="GET",
                url=url,
                status_code=resp.status_code,
                cause=exc,
            ) from exc
        return image

    # --- Request -> decode -> Result --------------------------------------- #

    async def fetch(
        self,
        decoder: Decoder[T],
        path: str,
        *,
        params: Optional[Dict[str, QueryValue]] = None,
        operation: Optional[str] = None,
        completion: Optional[Completion] = None,
    ) -> Result[T]:
        """
        GET ``path`` and decode the body.
        Transport failures never reach the decoder; decode failures are
        reported verbatim. ``completion`` is called once with the result.
        """
        try:
            payload = await self.request(
                "GET", path, params=params, operation=operation
            )
        except TransportError as exc:
            result: Result[T] = Failure(exc)
        else:
            try:
                result = Success(decoder(payload))
            except DecodeError as exc:
                log_event(
                    "trello_decode_failed",
                    self.log,
                    level=logging.WARNING,
                    operation=operation,
                    endpoint=path,
                    error_type=type(exc).__name__,
                )
                result = Failure(exc)
        return _complete(result, completion)

    # --- Boards ------------------------------------------------------------ #

    async def get_all_boards(
        self, *, completion: Optional[Completion] = None
    ) -> Result[List[Board]]:
        return await self.fetch(
            _many(Board.decode),
            Route.ALL_BOARDS.path(),
            operation="get_all_boards",
            completion=completion,
        )

    async def get_board(
        self,
        board_id: str,
        *,
        lists: ListFilter = ListFilter.NONE,
        cards: CardFilter = CardFilter.NONE,
        members: MemberFilter = MemberFilter.NONE,
        completion: Optional[Completion] = None,
    ) -> Result[Board]:
        params = {
            "lists": str(ListFilter(lists)),
            "cards": str(CardFilter(cards)),
            "members": str(MemberFilter(members)),
        }
        return await self.fetch(
            Board.decode,
            Route.BOARD.path(board_id=board_id),
            params=params,
            operation="get_board",
            completion=completion,
        )

    # --- Lists ------------------------------------------------------------- #

    async def get_lists_for_board(
        self,
        board: Union[str, Board],
        *,
        filter: ListFilter = ListFilter.OPEN,
        completion: Optional[Completion] = None,
    ) -> Result[List[CardList]]:
        board_id = board.id if isinstance(board, Board) else board
        return await self.fetch(
            _many(CardList.decode),
            Route.LISTS.path(board_id=board_id),
            params={"filter": str(ListFilter(filter))},
            operation="get_lists_for_board",
            completion=completion,
        )

    # --- Cards ------------------------------------------------------------- #

    async def get_cards_for_list(
        self,
        list_id: str,
        *,
        with_members: bool = False,
        completion: Optional[Completion] = None,
    ) -> Result[List[Card]]:
        return await self.fetch(
            _many(Card.decode),
            Route.CARDS_FOR_LIST.path(list_id=list_id),
            params={"members": with_members},
            operation="get_cards_for_list",
            completion=completion,
        )

    # --- Members ----------------------------------------------------------- #

    async def get_member(
        self, member_id: str, *, completion: Optional[Completion] = None
    ) -> Result[Member]:
        return await self.fetch(
            Member.decode,
            Route.MEMBER.path(member_id=member_id),
            operation="get_member",
            completion=completion,
        )

    async def get_members_for_card(
        self, card_id: str, *, completion: Optional[Completion] = None
    ) -> Result[List[Member]]:
        return await self.fetch(
            _many(Member.decode),
            Route.MEMBERS_FOR_CARD.path(card_id=card_id),
            operation="get_members_for_card",
            completion=completion,
        )

    async def get_avatar_image(
        self,
        avatar_hash: str,
        size: AvatarSize = AvatarSize.LARGE,
        *,
        completion: Optional[Completion] = None,
    ) -> Result[Image.Image]:
        url = avatar_url(avatar_hash, size)
        try:
            image = await self.fetch_image(url, operation="get_avatar_image")
        except TransportError as exc:
            return _complete(Failure(exc), completion)
        return _complete(Success(image), completion)


def _many(decoder: Decoder[T]) -> Decoder[List[T]]:
    def decode(payload: JSONValue) -> List[T]:
        return decode_list(payload, decoder)

    return decode


def _complete(result: Result[T], completion: Optional[Completion]) -> Result[T]:
    if completion is not None:
        completion(result)
    return result


__all__ = ["TrelloClient", "RetryConfig"]
