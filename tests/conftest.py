import json

import httpx
import pytest
from tenacity import wait_none

from airtable_client import Airtable, Config


class FakeApi:
    """Queue of canned responses served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list = []
        self.default: httpx.Response | None = None

    def reply(self, status_code: int = 200, json_body=None, text: str | None = None):
        if text is not None:
            self.responses.append(httpx.Response(status_code, text=text))
        else:
            self.responses.append(httpx.Response(status_code, json=json_body))
        return self

    def fail(self, exc: Exception):
        self.responses.append(exc)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            item = self.responses.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        if isinstance(item, Exception):
            raise item
        return item

    def body(self, index: int = -1):
        content = self.requests[index].content
        return json.loads(content) if content else None


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def airtable(fake_api):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    return Airtable(
        api_key="keyTEST",
        retry_wait=wait_none(),
        config=Config(),
        http_client=http_client,
    )


@pytest.fixture
def base(airtable):
    return airtable.base("appBASE")


@pytest.fixture
def table(base):
    return base.table("My Table")
