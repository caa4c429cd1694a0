import os
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from tenacity import wait_exponential

from .errors import ConfigurationError

DEFAULT_ENDPOINT_URL = "https://api.airtable.com"
DEFAULT_API_VERSION = "0.1.0"
DEFAULT_REQUEST_TIMEOUT = 300.0  # seconds, 5 minutes

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v


def env_bool(name: str, default: bool = False) -> bool:
    v = env(name)
    if v is None:
        return default
    v = v.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigurationError(f"Env var {name} must be a boolean, got {v!r}")


def env_float(name: str, default: float) -> float:
    v = env(name)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        raise ConfigurationError(f"Env var {name} must be a number, got {v!r}") from None


@dataclass(frozen=True)
class Config:
    """Connection settings shared by every client built from it.

    Build one at startup (``Config.from_env()`` or by hand) and hand it to
    ``Airtable(config=...)``. Keyword arguments given to ``Airtable`` win over
    it, and ``Base.run_action`` overrides win over both.
    """

    api_key: str | None = None
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    api_version: str = DEFAULT_API_VERSION
    allow_unauthorized_ssl: bool = False
    no_retry_if_rate_limited: bool = False
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    # tenacity wait strategy used between rate-limited attempts
    retry_wait: Callable[[Any], float] = field(default_factory=lambda: wait_exponential(min=1, max=20))

    def __post_init__(self):
        if not self.endpoint_url:
            raise ConfigurationError("endpoint_url must not be empty")
        if not self.api_version:
            raise ConfigurationError("api_version must not be empty")
        if self.request_timeout is None or self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be > 0, got {self.request_timeout!r}")

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            api_key=env("AIRTABLE_API_KEY"),
            endpoint_url=env("AIRTABLE_ENDPOINT_URL", DEFAULT_ENDPOINT_URL),
            api_version=env("AIRTABLE_API_VERSION", DEFAULT_API_VERSION),
            allow_unauthorized_ssl=env_bool("AIRTABLE_ALLOW_UNAUTHORIZED_SSL"),
            no_retry_if_rate_limited=env_bool("AIRTABLE_NO_RETRY_IF_RATE_LIMITED"),
            request_timeout=env_float("AIRTABLE_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        )

    @property
    def api_version_major(self) -> str:
        return self.api_version.split(".")[0]

    def merged(self, **overrides) -> "Config":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)
