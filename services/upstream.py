"""HTTP client for upstream Salesforce requests with redirect following."""

from collections.abc import AsyncIterable, Callable

import httpx

from core.exceptions import RedirectLimitExceeded, UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import RelayParams
from services.redirects import RedirectHop, build_redirect_hop

RedirectHandler = Callable[[RedirectHop], None]

SAFE_METHODS = ("GET", "HEAD")


class UpstreamClient:
    """Send outbound requests and follow redirects hop by hop."""

    def __init__(self, client: httpx.AsyncClient, max_redirects: int = 10) -> None:
        self._client = client
        self._max_redirects = max_redirects

    async def open(
        self,
        params: RelayParams,
        content: bytes | AsyncIterable[bytes] | None = None,
        on_redirect: RedirectHandler | None = None,
    ) -> httpx.Response:
        """Send ``params`` and return the final, still streaming, response.

        ``on_redirect`` runs before each redirect hop is sent. The caller must
        close the returned response.
        """
        request = self._client.build_request(
            params.method,
            params.url,
            headers=params.headers,
            content=content,
        )
        hops = 0
        while True:
            response = await self._send(request)
            if not self._should_follow(params, request, response):
                return response

            if hops >= self._max_redirects:
                await response.aclose()
                raise RedirectLimitExceeded(
                    f"Exceeded maximum of {self._max_redirects} redirects",
                    status_code=response.status_code,
                    url=str(request.url),
                )
            hops += 1

            await response.aread()
            await response.aclose()

            hop = build_redirect_hop(request, response, keep_method=params.follow_original_method)
            if on_redirect is not None:
                on_redirect(hop)
            request = self._client.build_request(
                hop.method,
                hop.url,
                headers=hop.headers,
                content=hop.body,
            )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._client.send(request, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}", url=str(request.url)) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}", url=str(request.url)) from e

    @staticmethod
    def _should_follow(params: RelayParams, request: httpx.Request, response: httpx.Response) -> bool:
        if not response.has_redirect_location:
            return False
        return params.follow_all_redirects or request.method in SAFE_METHODS
