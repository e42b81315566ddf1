"""Header allow-list and CORS headers."""

from collections.abc import Mapping

ENDPOINT_HEADER = "Salesforceproxy-Endpoint"

ALLOWED_HEADERS = (
    "Authorization",
    "Content-Type",
    ENDPOINT_HEADER,
    "X-Authorization",
    "X-SFDC-Session",
    "SOAPAction",
    "SForce-Auto-Assign",
    "If-Modified-Since",
    "X-User-Agent",
)

# Lets callers send a credential that survives frameworks which rewrite Authorization.
HEADER_ALIASES = {"x-authorization": "Authorization"}

CORS_ALLOWED_METHODS = "GET,POST,PATCH,PUT,DELETE"
CORS_EXPOSED_HEADERS = "SForce-Limit-Info"


class HeaderProjector:
    """Copy allow-listed inbound headers onto the outbound request."""

    def __init__(self, allowed: tuple[str, ...] = ALLOWED_HEADERS) -> None:
        self.allowed = allowed

    def project(self, headers: Mapping[str, str]) -> dict[str, str]:
        """Return outbound headers; ``headers`` must do case-insensitive lookup."""
        upstream: dict[str, str] = {}
        for name in self.allowed:
            value = headers.get(name)
            if not value:
                continue
            upstream[HEADER_ALIASES.get(name.lower(), name)] = value
        return upstream

    def cors_headers(self, allowed_origin: str = "*") -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": allowed_origin or "*",
            "Access-Control-Allow-Methods": CORS_ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ",".join(self.allowed),
            "Access-Control-Expose-Headers": CORS_EXPOSED_HEADERS,
        }
