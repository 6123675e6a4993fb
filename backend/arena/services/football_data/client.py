from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from arena.errors import ConfigurationError
from arena.services.results import MatchResult, ResultFetcher

from .config import FootballDataConfig
from .exceptions import (
    FootballDataAPIError,
    FootballDataAuthError,
    FootballDataForbiddenError,
    FootballDataNotFoundError,
    FootballDataRateLimitError,
)

logger = logging.getLogger(__name__)


class FootballDataClient(ResultFetcher):
    """
    Minimal football-data.org v4 client.

    Does no pacing of its own; settlement spaces calls out to stay inside the
    free tier's ~10 requests/minute.
    """

    def __init__(
        self,
        api_token: str,
        config: FootballDataConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_token:
            raise ConfigurationError("football-data.org API token is required.")
        self.config = config or FootballDataConfig()
        self._api_token = api_token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> FootballDataClient:
        limits = httpx.Limits(max_connections=self.config.max_connections)
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            limits=limits,
            headers={"X-Auth-Token": self._api_token},
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed FootballDataClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "FootballDataClient must be used as async context manager"
            )
        return self._client

    async def _request(self, method: str, endpoint: str) -> dict[str, Any]:
        attempts = 0
        last_error: Exception | None = None

        while attempts < self.config.max_retries:
            attempts += 1
            try:
                response = await self.client.request(method=method, url=endpoint)
            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(f"Timeout requesting {endpoint} (attempt {attempts})")
                continue
            except httpx.RequestError as e:
                last_error = e
                logger.error(f"Network error requesting {endpoint}: {e}")
                break

            if response.status_code == 401:
                raise FootballDataAuthError("Authentication failed", status_code=401)
            if response.status_code == 403:
                # Per-fixture: the competition is outside the token's plan
                raise FootballDataForbiddenError(
                    f"Access denied to {endpoint}", status_code=403
                )
            if response.status_code == 404:
                raise FootballDataNotFoundError(
                    f"Resource not found: {endpoint}", status_code=404
                )
            if response.status_code == 429:
                raise FootballDataRateLimitError(
                    f"Rate limited requesting {endpoint}", status_code=429
                )
            if response.status_code >= 400:
                last_error = FootballDataAPIError(
                    f"HTTP {response.status_code} from {endpoint}",
                    status_code=response.status_code,
                )
                logger.warning(str(last_error))
                continue

            try:
                return response.json()
            except ValueError as e:
                raise FootballDataAPIError(f"Invalid JSON from {endpoint}: {e}")

        raise FootballDataAPIError(
            f"Request to {endpoint} failed after {attempts} attempt(s): {last_error}"
        )

    async def fetch_result(self, api_id: int) -> MatchResult:
        data = await self._request("GET", f"matches/{api_id}")
        try:
            return MatchResult.from_api(api_id, data)
        except PydanticValidationError as e:
            raise FootballDataAPIError(f"Unexpected payload for match {api_id}: {e}")
