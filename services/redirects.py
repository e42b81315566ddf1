"""Redirect hop construction for the upstream client."""

from dataclasses import dataclass

import httpx

# Never carried over to the next hop; the relay may put some of them back.
STRIPPED_ON_REDIRECT = ("host", "content-type", "content-length", "transfer-encoding")


@dataclass
class RedirectHop:
    """A redirect about to be followed.

    ``headers`` and ``body`` may be changed by redirect handlers before the
    hop is sent.
    """

    status_code: int
    url: httpx.URL
    method: str
    headers: httpx.Headers
    body: bytes | None = None


def redirect_method(method: str, status_code: int, keep_method: bool) -> str:
    """Return the method to use for the next hop."""
    if keep_method:
        return method
    if status_code == 303 and method != "HEAD":
        return "GET"
    if status_code in (301, 302) and method == "POST":
        return "GET"
    return method


def build_redirect_hop(
    request: httpx.Request,
    response: httpx.Response,
    keep_method: bool = True,
) -> RedirectHop:
    """Build the next hop from a redirect response."""
    url = request.url.join(response.headers["location"])
    headers = httpx.Headers(request.headers)
    for name in STRIPPED_ON_REDIRECT:
        headers.pop(name, None)
    # A new port or scheme keeps credentials; a new host drops them.
    if url.host != request.url.host:
        headers.pop("authorization", None)
    return RedirectHop(
        status_code=response.status_code,
        url=url,
        method=redirect_method(request.method, response.status_code, keep_method),
        headers=headers,
    )
