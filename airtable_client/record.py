from typing import TYPE_CHECKING, Any

from .callbacks import callback_or_awaitable
from .errors import InvalidParametersError

if TYPE_CHECKING:
    from .table import Table


def _require_id(record: "Record", *args, **kwargs):
    record._path()


class Record:
    """One row of a table.

    ``fields`` is the snapshot from the last successful response. It is
    replaced wholesale by every remote call and never merged locally.
    """

    def __init__(self, table: "Table", record_id: str | None = None, record_json: dict[str, Any] | None = None):
        self._table = table
        self.id = record_id or (record_json or {}).get("id")
        self.raw_json: dict[str, Any] | None = None
        self.fields: dict[str, Any] = {}
        self.set_raw_json(record_json)

    def __repr__(self) -> str:
        return f"Record({self.id!r}, fields={self.fields!r})"

    @property
    def created_time(self) -> str | None:
        return (self.raw_json or {}).get("createdTime")

    def get_id(self) -> str | None:
        return self.id

    def get(self, field_name: str) -> Any:
        return self.fields.get(field_name)

    def set(self, field_name: str, value: Any):
        self.fields[field_name] = value

    def set_raw_json(self, raw_json: dict[str, Any] | None):
        self.raw_json = raw_json
        self.fields = dict((raw_json or {}).get("fields") or {})

    def _path(self) -> str:
        if not self.id:
            raise InvalidParametersError("Record ID is required")
        return f"/{self._table.url_encoded_name_or_id()}/{self.id}"

    async def _write(self, method: str, fields: dict[str, Any], opts: dict[str, Any] | None) -> "Record":
        body = {"fields": fields, **(opts or {})}
        results = await self._table.base.run_action(method, self._path(), {}, body)
        self.set_raw_json(results)
        return self

    @callback_or_awaitable(precheck=_require_id)
    async def fetch(self) -> "Record":
        results = await self._table.base.run_action("get", self._path())
        self.set_raw_json(results)
        return self

    @callback_or_awaitable(precheck=_require_id)
    async def patch_update(self, fields: dict[str, Any], opts: dict[str, Any] | None = None) -> "Record":
        """Change only the given fields; the others stay as they are."""
        return await self._write("patch", fields, opts)

    @callback_or_awaitable(precheck=_require_id)
    async def put_update(self, fields: dict[str, Any], opts: dict[str, Any] | None = None) -> "Record":
        """Set the given fields and clear every other one."""
        return await self._write("put", fields, opts)

    @callback_or_awaitable(precheck=_require_id)
    async def save(self) -> "Record":
        return await self._write("put", dict(self.fields), None)

    @callback_or_awaitable(precheck=_require_id)
    async def destroy(self) -> "Record":
        await self._table.base.run_action("delete", self._path())
        return self

    update_fields = patch_update
    replace_fields = put_update
