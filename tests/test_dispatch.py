import asyncio
import time

import httpx
import pytest
from tenacity import wait_fixed, wait_none

from airtable_client import (
    Airtable,
    AuthenticationRequiredError,
    Config,
    InvalidParametersError,
    InvalidRequestError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)


def test_success_returns_parsed_body(base, fake_api):
    fake_api.reply(200, {"id": "rec1", "fields": {"Name": "a"}})

    body = asyncio.run(base.run_action("get", "/Tasks/rec1"))

    assert body == {"id": "rec1", "fields": {"Name": "a"}}
    request = fake_api.requests[0]
    assert request.method == "GET"
    assert str(request.url) == "https://api.airtable.com/v0/appBASE/Tasks/rec1"


def test_request_headers(base, fake_api):
    fake_api.reply(200, {})

    asyncio.run(base.run_action("post", "/Tasks/", {}, {"fields": {"a": 1}}))

    headers = fake_api.requests[0].headers
    assert headers["authorization"] == "Bearer keyTEST"
    assert headers["content-type"] == "application/json"
    assert headers["x-api-version"] == "0.1.0"
    assert headers["x-airtable-application-id"] == "appBASE"
    assert headers["user-agent"].startswith("airtable-client/")
    assert fake_api.body() == {"fields": {"a": 1}}


def test_endpoint_and_version_from_config(fake_api):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    airtable = Airtable(
        config=Config(api_key="k", endpoint_url="http://localhost:8080/", api_version="2.3.1"),
        http_client=http_client,
    )
    fake_api.reply(200, {})

    asyncio.run(airtable.base("appX").run_action("get", "/T/"))

    assert str(fake_api.requests[0].url) == "http://localhost:8080/v2/appX/T/"


def test_query_params_are_encoded(base, fake_api):
    fake_api.reply(200, {"records": []})

    asyncio.run(
        base.run_action(
            "get",
            "/Tasks/",
            {"limit": 10, "offset": None, "fields": ["a", "b"], "sort": [{"field": "a", "direction": "desc"}]},
        )
    )

    params = fake_api.requests[0].url.params
    assert params["limit"] == "10"
    assert "offset" not in params
    assert params.get_list("fields[]") == ["a", "b"]
    assert params["sort[0][field]"] == "a"
    assert params["sort[0][direction]"] == "desc"


def test_patch_update_alias(base, fake_api):
    fake_api.reply(200, {})

    asyncio.run(base.run_action("patch-update", "/Tasks/rec1", {}, {"fields": {}}))

    assert fake_api.requests[0].method == "PATCH"


def test_unknown_method_is_rejected_locally(base, fake_api):
    with pytest.raises(InvalidParametersError):
        asyncio.run(base.run_action("head", "/Tasks/"))
    assert fake_api.requests == []


def test_rate_limit_then_success_is_invisible(base, fake_api):
    fake_api.reply(429, {"errors": [{"error": "RATE_LIMIT_REACHED"}]})
    fake_api.reply(429, {})
    fake_api.reply(200, {"id": "rec1", "fields": {}})

    body = asyncio.run(base.run_action("patch", "/Tasks/rec1", {}, {"fields": {"a": 1}}))

    assert body == {"id": "rec1", "fields": {}}
    assert len(fake_api.requests) == 3
    # every attempt re-sends the same action
    assert {r.content for r in fake_api.requests} == {fake_api.requests[0].content}
    assert {str(r.url) for r in fake_api.requests} == {str(fake_api.requests[0].url)}


def test_rate_limit_not_retried_when_disabled(fake_api):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    airtable = Airtable(api_key="k", no_retry_if_rate_limited=True, config=Config(), http_client=http_client)
    fake_api.reply(429, {})
    fake_api.reply(200, {})

    with pytest.raises(RateLimitError) as excinfo:
        asyncio.run(airtable.base("app").run_action("get", "/T/"))

    assert excinfo.value.status_code == 429
    assert excinfo.value.error == "TOO_MANY_REQUESTS"
    assert len(fake_api.requests) == 1


def test_rate_limit_retry_can_be_disabled_per_call(base, fake_api):
    fake_api.reply(429, {})

    with pytest.raises(RateLimitError):
        asyncio.run(base.run_action("get", "/T/", no_retry_if_rate_limited=True))

    assert len(fake_api.requests) == 1


def test_rate_limit_surfaces_when_timeout_runs_out(fake_api):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    airtable = Airtable(
        api_key="k",
        request_timeout=0.2,
        retry_wait=wait_fixed(0.05),
        config=Config(),
        http_client=http_client,
    )
    fake_api.default = httpx.Response(429, json={})

    with pytest.raises(RateLimitError):
        asyncio.run(airtable.base("app").run_action("get", "/T/"))

    assert 2 <= len(fake_api.requests) <= 6


@pytest.mark.parametrize(
    "status, error_cls, code",
    [
        (401, AuthenticationRequiredError, "AUTHENTICATION_REQUIRED"),
        (404, NotFoundError, "NOT_FOUND"),
        (500, ServerError, "SERVER_ERROR"),
        (503, ServerError, "SERVICE_UNAVAILABLE"),
    ],
)
def test_other_errors_are_not_retried(base, fake_api, status, error_cls, code):
    fake_api.reply(status, {})
    fake_api.reply(200, {})

    with pytest.raises(error_cls) as excinfo:
        asyncio.run(base.run_action("get", "/T/rec1"))

    assert excinfo.value.status_code == status
    assert excinfo.value.error == code
    assert len(fake_api.requests) == 1


def test_error_payload_is_carried(base, fake_api):
    fake_api.reply(422, {"error": {"type": "INVALID_VALUE_FOR_COLUMN", "message": "Field 'a' cannot accept 'x'"}})

    with pytest.raises(InvalidRequestError) as excinfo:
        asyncio.run(base.run_action("patch", "/T/rec1", {}, {"fields": {"a": "x"}}))

    err = excinfo.value
    assert err.error == "INVALID_VALUE_FOR_COLUMN"
    assert err.message == "Field 'a' cannot accept 'x'"
    assert "INVALID_VALUE_FOR_COLUMN" in err.body
    assert str(err) == "Field 'a' cannot accept 'x'(INVALID_VALUE_FOR_COLUMN)[Http code 422]"


def test_connection_error(base, fake_api):
    fake_api.fail(httpx.ConnectError("connection refused"))

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(base.run_action("get", "/T/"))

    assert excinfo.value.error == "CONNECTION_ERROR"
    assert excinfo.value.status_code is None
    assert len(fake_api.requests) == 1


def test_malformed_json_body(base, fake_api):
    fake_api.reply(200, text="<html>not json</html>")

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(base.run_action("get", "/T/"))

    assert excinfo.value.error == "UNEXPECTED_ERROR"
    assert excinfo.value.status_code == 200


def test_empty_success_body(base, fake_api):
    fake_api.responses.append(httpx.Response(204))

    assert asyncio.run(base.run_action("delete", "/T/rec1")) == {}


def test_slow_response_times_out():
    async def slow(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(slow))
    airtable = Airtable(api_key="k", request_timeout=0.05, retry_wait=wait_none(), config=Config(), http_client=http_client)

    with pytest.raises(RequestTimeoutError) as excinfo:
        asyncio.run(airtable.base("app").run_action("get", "/T/"))

    assert isinstance(excinfo.value, TransportError)
    assert excinfo.value.error == "REQUEST_TIMEOUT"


def test_backoff_never_sleeps_past_the_timeout(fake_api):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    airtable = Airtable(
        api_key="k",
        request_timeout=0.3,
        retry_wait=wait_fixed(5),
        config=Config(),
        http_client=http_client,
    )
    fake_api.default = httpx.Response(429, json={})

    started = time.monotonic()
    with pytest.raises(RateLimitError):
        asyncio.run(airtable.base("app").run_action("get", "/T/"))
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert len(fake_api.requests) <= 2
