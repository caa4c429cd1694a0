import logging

from .base import Base
from .client import Airtable
from .config import Config
from .errors import (
    AirtableError,
    AuthenticationRequiredError,
    ConfigurationError,
    InvalidParametersError,
    InvalidRequestError,
    NotAuthorizedError,
    NotFoundError,
    RateLimitError,
    RemoteError,
    RequestTimeoutError,
    RequestTooLargeError,
    ServerError,
    TransportError,
)
from .query import Query
from .record import Record
from .table import Table
from .version import VERSION as __version__

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Airtable",
    "Base",
    "Config",
    "Query",
    "Record",
    "Table",
    "AirtableError",
    "AuthenticationRequiredError",
    "ConfigurationError",
    "InvalidParametersError",
    "InvalidRequestError",
    "NotAuthorizedError",
    "NotFoundError",
    "RateLimitError",
    "RemoteError",
    "RequestTimeoutError",
    "RequestTooLargeError",
    "ServerError",
    "TransportError",
]
