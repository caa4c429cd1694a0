import logging
from typing import Any, Callable

import httpx

from .base import Base
from .config import Config
from .errors import AuthenticationRequiredError

logger = logging.getLogger(__name__)


class Airtable:
    """Entry point: resolved settings plus the HTTP client they configure.

    Settings resolve in this order: keyword arguments, then ``config``
    (``Config.from_env()`` when omitted), then the built-in defaults.
    ``Base.run_action`` takes per-call overrides on top of that.
    """

    def __init__(
        self,
        api_key: str | None = None,
        endpoint_url: str | None = None,
        api_version: str | None = None,
        allow_unauthorized_ssl: bool | None = None,
        no_retry_if_rate_limited: bool | None = None,
        request_timeout: float | None = None,
        retry_wait: Callable[[Any], float] | None = None,
        *,
        config: Config | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        config = config if config is not None else Config.from_env()
        self.config = config.merged(
            api_key=api_key,
            endpoint_url=endpoint_url,
            api_version=api_version,
            allow_unauthorized_ssl=allow_unauthorized_ssl,
            no_retry_if_rate_limited=no_retry_if_rate_limited,
            request_timeout=request_timeout,
            retry_wait=retry_wait,
        )
        if not self.config.api_key:
            raise AuthenticationRequiredError("API key is required to connect to Airtable")

        self._http_client = http_client
        self._owns_http_client = http_client is None
        logger.debug(
            "Airtable client for %s (api v%s, timeout=%ss, managed retry=%s)",
            self.config.endpoint_url,
            self.config.api_version,
            self.config.request_timeout,
            not self.config.no_retry_if_rate_limited,
        )

    def base(self, base_id: str) -> Base:
        return Base(self, base_id)

    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                verify=not self.config.allow_unauthorized_ssl,
                timeout=httpx.Timeout(self.config.request_timeout),
            )
        return self._http_client

    async def aclose(self):
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "Airtable":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
