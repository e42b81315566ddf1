"""Relay browser requests to Salesforce, replaying credentials across redirects."""

from collections.abc import AsyncIterable, AsyncIterator, Mapping

import httpx
from fastapi import Request, Response
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from core.config import Config
from core.counter import InFlightCounter
from core.endpoint import EndpointValidator
from core.exceptions import EndpointNotAllowed, UpstreamError
from core.headers import ENDPOINT_HEADER, HeaderProjector
from core.protocols import DispatchOverride, RelayLogger
from core.request_types import RelayParams
from services.redirects import RedirectHop
from services.upstream import UpstreamClient

NOT_ALLOWED_MESSAGE = "Proxying endpoint is not allowed."

# Hop-by-hop headers that should NOT be relayed back (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}

# The body is relayed decoded, so its original framing no longer applies.
DECODED_BODY_HEADERS = {"content-encoding", "content-length"}


class BodyRecorder:
    """Pass an inbound body stream through while keeping a copy of it."""

    def __init__(self, source: AsyncIterable[bytes]) -> None:
        self._source = source
        self._chunks: list[bytes] = []

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self._source:
            if chunk:
                self._chunks.append(chunk)
                yield chunk

    @property
    def body(self) -> bytes:
        return b"".join(self._chunks)


class Relay:
    """Forward validated requests to Salesforce and stream the answer back."""

    def __init__(
        self,
        config: Config,
        upstream: UpstreamClient,
        logger: RelayLogger,
        validator: EndpointValidator | None = None,
        projector: HeaderProjector | None = None,
        overrides: Mapping[str, DispatchOverride] | None = None,
    ) -> None:
        self._config = config
        self._upstream = upstream
        self._logger = logger
        self._validator = validator or EndpointValidator()
        self._projector = projector or HeaderProjector()
        self._overrides = dict(overrides or {})
        self.in_flight = InFlightCounter()

    async def handle(self, request: Request) -> Response:
        cors = self._cors_headers()
        if cors and request.method == "OPTIONS":
            return Response(headers=cors)

        try:
            params = self.prepare(request)
        except EndpointNotAllowed as e:
            self._logger.log_rejected(e.endpoint)
            return PlainTextResponse(NOT_ALLOWED_MESSAGE, status_code=400, headers=cors)

        override = self._overrides.get(request.method)
        if override is not None:
            response = await override(params)
            if response is None:
                response = Response()
            _merge_missing(response, cors)
            return response

        return await self._dispatch(request, params, cors)

    def prepare(self, request: Request) -> RelayParams:
        """Validate the destination and assemble outbound parameters."""
        endpoint = request.headers.get(ENDPOINT_HEADER)
        if endpoint is not None and not self._validator.is_allowed(endpoint):
            raise EndpointNotAllowed(endpoint)
        return RelayParams(
            url=endpoint or self._config.upstream.default_endpoint,
            method=request.method,
            headers=self._projector.project(request.headers),
        )

    async def _dispatch(
        self,
        request: Request,
        params: RelayParams,
        cors: dict[str, str],
    ) -> Response:
        recorder = BodyRecorder(request.stream()) if _has_body(request) else None
        self._logger.log_request(params, self.in_flight.increment())

        def replay(hop: RedirectHop) -> None:
            # Credentials and body only follow redirects to another trusted host.
            url = str(hop.url)
            if not self._validator.is_allowed(url):
                self._logger.log_redirect(url, hop.status_code, replayed=False)
                return
            authorization = request.headers.get("authorization")
            if authorization:
                hop.headers["Authorization"] = authorization
            content_type = request.headers.get("content-type")
            if content_type:
                hop.headers["Content-Type"] = content_type
            if recorder is not None and recorder.body:
                hop.body = recorder.body
            self._logger.log_redirect(url, hop.status_code, replayed=True)

        try:
            upstream = await self._upstream.open(params, content=recorder, on_redirect=replay)
        except UpstreamError as e:
            self._logger.log_error(e.url or params.url, str(e), self.in_flight.decrement())
            raise
        except BaseException as e:
            # Inbound disconnects and cancellation end the exchange too.
            self._logger.log_error(params.url, f"{type(e).__name__}: {e}", self.in_flight.decrement())
            raise

        self._logger.log_response(str(upstream.url), upstream.status_code, self.in_flight.decrement())
        return self._relay_response(upstream, cors)

    def _relay_response(self, upstream: httpx.Response, cors: dict[str, str]) -> StreamingResponse:
        response = StreamingResponse(
            upstream.aiter_bytes(),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        for name, value in upstream.headers.multi_items():
            if name.lower() not in HOP_BY_HOP_HEADERS | DECODED_BODY_HEADERS:
                response.headers.append(name, value)
        _merge_missing(response, cors)
        return response

    def _cors_headers(self) -> dict[str, str]:
        if not self._config.cors.enabled:
            return {}
        return self._projector.cors_headers(self._config.cors.allowed_origin)


def _has_body(request: Request) -> bool:
    if "transfer-encoding" in request.headers:
        return True
    return request.headers.get("content-length", "0") not in ("", "0")


def _merge_missing(response: Response, headers: Mapping[str, str]) -> None:
    """Add ``headers`` the response does not already set."""
    for name, value in headers.items():
        if name not in response.headers:
            response.headers[name] = value
