import inspect
import logging
from contextlib import aclosing
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable

from .callbacks import callback_or_awaitable

if TYPE_CHECKING:
    from .record import Record
    from .table import Table

logger = logging.getLogger(__name__)


class Query:
    """Walks the pages of a listing, one request at a time.

    Built by ``Table.select`` with already validated parameters. Each
    traversal starts at the beginning of the table: the cursor is unset
    before the first request and iteration ends as soon as a response comes
    back without an ``offset``.
    """

    def __init__(self, table: "Table", params: dict[str, Any]):
        self._table = table
        self._params = dict(params)

    def __repr__(self) -> str:
        return f"Query({self._table!r}, {self._params!r})"

    async def pages(self) -> AsyncIterator[list["Record"]]:
        """Yield each page in server order. Break out to stop early."""
        offset = None
        page_number = 0
        while True:
            records, offset = await self._table.list_page(None, offset, self._params)
            page_number += 1
            logger.debug("%r page %d: %d records, more=%s", self._table, page_number, len(records), bool(offset))
            yield records
            if not offset:
                return

    @callback_or_awaitable
    async def first_page(self) -> list["Record"]:
        records, _ = await self._table.list_page(None, None, self._params)
        return records

    @callback_or_awaitable
    async def each_page(self, page_callback: Callable[[list["Record"]], Any]) -> None:
        """Call ``page_callback(records)`` for every page.

        The callback may be a coroutine function; it is awaited before the
        next page is requested. A failure stops the walk; pages already
        delivered stay delivered.
        """
        async with aclosing(self.pages()) as pages:
            async for records in pages:
                result = page_callback(records)
                if inspect.isawaitable(result):
                    await result

    @callback_or_awaitable
    async def all(self) -> list["Record"]:
        out: list["Record"] = []
        async with aclosing(self.pages()) as pages:
            async for records in pages:
                out.extend(records)
        return out
