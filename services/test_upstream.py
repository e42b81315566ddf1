import httpx
import pytest

from core.exceptions import RedirectLimitExceeded, UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import RelayParams
from services.upstream import UpstreamClient

START = "https://na1.salesforce.com/services/data/"
NEXT = "https://na1.salesforce.com/services/next/"


def _client(handler, max_redirects=10):
    return UpstreamClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)), max_redirects=max_redirects)


@pytest.mark.asyncio
async def test_returns_response_without_redirect():
    upstream = _client(lambda request: httpx.Response(201, content=b"created"))

    response = await upstream.open(RelayParams(url=START, method="POST"), content=b"{}")
    body = await response.aread()
    await response.aclose()
    await upstream.aclose()

    assert response.status_code == 201
    assert body == b"created"


@pytest.mark.asyncio
async def test_follows_redirect_keeping_method():
    seen = []

    def handler(request):
        seen.append((request.method, str(request.url)))
        if str(request.url) == START:
            return httpx.Response(302, headers={"Location": NEXT})
        return httpx.Response(200, content=b"done")

    upstream = _client(handler)
    response = await upstream.open(RelayParams(url=START, method="PATCH"), content=b"{}")
    await response.aclose()
    await upstream.aclose()

    assert seen == [("PATCH", START), ("PATCH", NEXT)]
    assert str(response.url) == NEXT


@pytest.mark.asyncio
async def test_redirect_handler_runs_before_hop_is_sent():
    seen = []

    def handler(request):
        seen.append((str(request.url), request.headers.get("x-replayed"), request.content))
        if str(request.url) == START:
            return httpx.Response(307, headers={"Location": NEXT})
        return httpx.Response(200)

    def on_redirect(hop):
        hop.headers["X-Replayed"] = "yes"
        hop.body = b"again"

    upstream = _client(handler)
    response = await upstream.open(RelayParams(url=START, method="POST"), content=b"first", on_redirect=on_redirect)
    await response.aclose()
    await upstream.aclose()

    assert seen == [(START, None, b"first"), (NEXT, "yes", b"again")]


@pytest.mark.asyncio
async def test_non_safe_methods_not_followed_unless_asked():
    def handler(request):
        return httpx.Response(302, headers={"Location": NEXT})

    upstream = _client(handler)
    params = RelayParams(url=START, method="POST", follow_all_redirects=False)
    response = await upstream.open(params, content=b"{}")
    await response.aclose()
    await upstream.aclose()

    assert response.status_code == 302


@pytest.mark.asyncio
async def test_redirect_limit():
    def handler(request):
        return httpx.Response(302, headers={"Location": START})

    upstream = _client(handler, max_redirects=3)
    with pytest.raises(RedirectLimitExceeded) as exc_info:
        await upstream.open(RelayParams(url=START, method="GET"))
    await upstream.aclose()

    assert exc_info.value.status_code == 302
    assert exc_info.value.url == START


@pytest.mark.asyncio
async def test_timeout_is_mapped():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    upstream = _client(handler)
    with pytest.raises(UpstreamTimeoutError) as exc_info:
        await upstream.open(RelayParams(url=START, method="GET"))
    await upstream.aclose()

    assert exc_info.value.url == START


@pytest.mark.asyncio
async def test_connection_error_is_mapped():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    upstream = _client(handler)
    with pytest.raises(UpstreamConnectionError):
        await upstream.open(RelayParams(url=START, method="GET"))
    await upstream.aclose()
