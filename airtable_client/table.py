import warnings
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import quote

from .callbacks import callback_or_awaitable
from .errors import InvalidParametersError
from .query import Query
from .query_params import validate_params
from .record import Record

if TYPE_CHECKING:
    from .base import Base

RECORDS_PER_PAGE_FOR_ITERATION = 100


def _require_record_id(table: "Table", record_id: str | None = None, *args, **kwargs):
    if not record_id:
        raise InvalidParametersError("Record ID is required")


class Table:
    """CRUD and listing for one table. Use either the table id or its name."""

    def __init__(self, base: "Base", table_id: str | None = None, table_name: str | None = None):
        if not table_id and not table_name:
            raise InvalidParametersError("Table name or table ID is required")
        self.base = base
        self.id = table_id
        self.name = table_name

    def __repr__(self) -> str:
        return f"Table({self.id or self.name!r})"

    def url_encoded_name_or_id(self) -> str:
        return self.id or quote(self.name, safe="")

    def _path(self) -> str:
        return f"/{self.url_encoded_name_or_id()}/"

    def select(self, params: dict[str, Any] | None = None) -> Query:
        return Query(self, validate_params(params))

    @callback_or_awaitable(precheck=_require_record_id)
    async def find(self, record_id: str) -> Record:
        return await Record(self, record_id).fetch()

    @callback_or_awaitable
    async def create(self, fields: dict[str, Any], opts: dict[str, Any] | None = None) -> Record:
        body = {"fields": fields, **(opts or {})}
        results = await self.base.run_action("post", self._path(), {}, body)
        return Record(self, results.get("id"), results)

    @callback_or_awaitable(precheck=_require_record_id)
    async def update(self, record_id: str, fields: dict[str, Any], opts: dict[str, Any] | None = None) -> Record:
        return await Record(self, record_id).patch_update(fields, opts)

    @callback_or_awaitable(precheck=_require_record_id)
    async def replace(self, record_id: str, fields: dict[str, Any], opts: dict[str, Any] | None = None) -> Record:
        return await Record(self, record_id).put_update(fields, opts)

    @callback_or_awaitable(precheck=_require_record_id)
    async def destroy(self, record_id: str) -> Record:
        return await Record(self, record_id).destroy()

    @callback_or_awaitable
    async def list_page(
        self,
        limit: int | None = None,
        offset: str | None = None,
        opts: dict[str, Any] | None = None,
    ) -> tuple[list[Record], str | None]:
        """Fetch one page. Records keep the order the server sent them in."""
        params = {"limit": limit, "offset": offset, **(opts or {})}
        results = await self.base.run_action("get", self._path(), params)
        records = [Record(self, None, record_json) for record_json in results.get("records", [])]
        return records, results.get("offset") or None

    @callback_or_awaitable
    async def for_each(self, callback: Callable[[Record], Any], opts: dict[str, Any] | None = None) -> None:
        warnings.warn(
            "Table.for_each() is deprecated. Use select() instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        offset = None
        while True:
            page, offset = await self.list_page(RECORDS_PER_PAGE_FOR_ITERATION, offset, opts)
            for record in page:
                callback(record)
            if not offset:
                break
