"""Match provider client, talking to the credential-injecting proxy."""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from config import settings
from domain.entities import MatchDetail, RemoteAccount
from domain.errors import (
    CredentialMissingError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    RemoteError,
    RemoteHTTPError,
    SchemaMismatchError,
    TransportError,
    UnauthorizedError,
    UserInputInvalidError,
)
from domain.interfaces import IMatchClient
from .rate_limiter import RateLimiter
from .retry import RetryPolicy, Sleep
from .schemas import AccountPayload, ErrorPayload, MatchIdList, MatchPayload

logger = logging.getLogger(__name__)


class RiotMatchClient(IMatchClient):
    """Asynchronous, rate-limited client for the three arena endpoints.

    The proxy exposes one URL and picks the provider route from the
    ``endpoint`` query parameter; it attaches the API token and applies the
    arena queue filter to id listings.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        rate_limiter: Optional[RateLimiter] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.base_url = base_url or settings.ARENA_PROXY_URL
        self.rate_limiter = rate_limiter or RateLimiter.from_settings()
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.session: Optional[httpx.AsyncClient] = None
        self.last_status_code: Optional[int] = None
        self._transport = transport
        self._sleep = sleep

    async def __aenter__(self):
        self.session = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self

    async def __aexit__(self, *_):
        if self.session:
            await self.session.aclose()
            self.session = None

    # ── Transport ──────────────────────────────────────────────────────

    def _error_for(self, response: httpx.Response) -> RemoteError:
        status = response.status_code
        text: Optional[str] = None
        try:
            text = ErrorPayload.model_validate(response.json()).text
        except (ValueError, ValidationError):
            text = response.text[:200] or None

        if status == 401:
            if text and ("not set" in text or "RIOT_API_TOKEN" in text):
                return CredentialMissingError(text)
            return UnauthorizedError(text or "401 Unauthorized")
        if status == 403:
            return ForbiddenError(text or "403 Forbidden")
        if status == 404:
            return NotFoundError(text or "404 Not Found")
        if status == 429:
            retry_after: Optional[float] = None
            try:
                retry_after = float(response.headers.get("Retry-After", ""))
            except ValueError:
                pass
            return RateLimitedError(text or "429 Too Many Requests", retry_after=retry_after)
        return RemoteHTTPError(status, text or "")

    async def _get_once(self, params: Dict[str, Any], bucket: Optional[str]) -> Any:
        if self.session is None:
            raise TransportError("client session is not open; use 'async with'")

        await self.rate_limiter.acquire(bucket)
        try:
            response = await self.session.get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"{params.get('endpoint')}: {exc}") from exc

        self.last_status_code = response.status_code
        if not response.is_success:
            error = self._error_for(response)
            logger.warning(f"HTTP {response.status_code} for endpoint={params.get('endpoint')}: {error}")
            raise error

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"{params.get('endpoint')}: response is not JSON") from exc

    async def _get(self, params: Dict[str, Any], bucket: Optional[str] = None) -> Any:
        kwargs = {"sleep": self._sleep} if self._sleep else {}
        return await self.retry_policy.run(
            lambda: self._get_once(params, bucket),
            context={"endpoint": params.get("endpoint")},
            **kwargs,
        )

    # ── Endpoints ──────────────────────────────────────────────────────

    async def resolve_account(self, game_name: str, tag_line: str) -> RemoteAccount:
        if not game_name or not tag_line:
            raise UserInputInvalidError("game name and tag line are required")
        data = await self._get({"endpoint": "account", "gameName": game_name, "tagLine": tag_line})
        try:
            return AccountPayload.model_validate(data).to_entity()
        except ValidationError as exc:
            raise SchemaMismatchError(f"account payload: {exc.error_count()} error(s)") from exc

    async def list_match_ids(self, puuid: str, count: int, start: int = 0) -> List[str]:
        data = await self._get(
            {"endpoint": "matchIds", "puuid": puuid, "count": count, "start": start},
            settings.MATCH_IDS_BUCKET,
        )
        try:
            return MatchIdList.validate_python(data)
        except ValidationError as exc:
            raise SchemaMismatchError(f"match id list: {exc.error_count()} error(s)") from exc

    async def fetch_match(self, match_id: str) -> MatchDetail:
        data = await self._get({"endpoint": "match", "matchId": match_id})
        try:
            return MatchPayload.model_validate(data).to_entity()
        except ValidationError as exc:
            raise SchemaMismatchError(f"match {match_id}: {exc.error_count()} error(s)") from exc
