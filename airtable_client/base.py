import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx

from .config import Config
from .errors import (
    InvalidParametersError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
    error_from_response,
)
from .query_params import encode_query_params
from .retry import Deadline, rate_limit_retrying
from .table import Table
from .version import VERSION

if TYPE_CHECKING:
    from .client import Airtable

logger = logging.getLogger(__name__)

METHODS = {
    "get": "GET",
    "post": "POST",
    "patch": "PATCH",
    "patch-update": "PATCH",
    "put": "PUT",
    "delete": "DELETE",
}


class Base:
    """One remote database. Every request of the client goes through ``run_action``."""

    def __init__(self, airtable: "Airtable", base_id: str):
        if not base_id:
            raise InvalidParametersError("Base ID is required")
        self._airtable = airtable
        self.id = base_id

    def __call__(self, table_name: str) -> Table:
        return self.table(table_name)

    def __repr__(self) -> str:
        return f"Base({self.id!r})"

    def table(self, table_name: str) -> Table:
        return Table(self, table_name=table_name)

    def _url(self, config: Config, path: str) -> str:
        return f"{config.endpoint_url.rstrip('/')}/v{config.api_version_major}/{self.id}{path}"

    def _headers(self, config: Config) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-api-version": config.api_version,
            "x-airtable-application-id": self.id,
            "User-Agent": f"airtable-client/{VERSION}",
        }

    async def run_action(
        self,
        method: str,
        path: str,
        query: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        *,
        request_timeout: float | None = None,
        no_retry_if_rate_limited: bool | None = None,
    ) -> dict[str, Any]:
        """Send one action and return the parsed JSON body.

        429 responses are retried with the configured backoff until the
        request timeout runs out, unless retry is turned off. Every other
        failure is raised on the first attempt.
        """
        http_method = METHODS.get(str(method).lower())
        if http_method is None:
            raise InvalidParametersError(f"Unsupported method {method!r}")

        config = self._airtable.config.merged(
            request_timeout=request_timeout,
            no_retry_if_rate_limited=no_retry_if_rate_limited,
        )
        url = self._url(config, path)
        headers = self._headers(config)
        params = encode_query_params(query)
        client = self._airtable.http_client()
        deadline = Deadline(config.request_timeout)

        rate_limited: RateLimitError | None = None
        payload: dict[str, Any] = {}
        async for attempt in rate_limit_retrying(
            deadline, config.retry_wait, enabled=not config.no_retry_if_rate_limited
        ):
            with attempt:
                if rate_limited is not None and deadline.expired:
                    raise rate_limited
                try:
                    payload = await self._send(client, http_method, url, params, body, headers, deadline)
                except RateLimitError as exc:
                    rate_limited = exc
                    raise
        return payload

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        params: list[tuple[str, str]],
        body: dict[str, Any] | None,
        headers: dict[str, str],
        deadline: Deadline,
    ) -> dict[str, Any]:
        remaining = deadline.remaining()
        logger.debug("%s %s", method, url)
        try:
            response = await asyncio.wait_for(
                client.request(method, url, params=params or None, json=body, headers=headers, timeout=remaining),
                timeout=remaining,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(f"No response within {deadline.seconds}s") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Could not reach the API: {exc}") from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if not response.is_success:
            raise error_from_response(response)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                "Response body is not valid JSON",
                error="UNEXPECTED_ERROR",
                status_code=response.status_code,
                body=response.text,
            ) from exc
