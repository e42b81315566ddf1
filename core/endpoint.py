"""Destination URL validation."""

import re

TRUSTED_DOMAINS = ("visualforce", "force", "salesforce", "cloudforce", "database")

# Anchored at the start and requires the slash that opens the path.
ENDPOINT_PATTERN = re.compile(
    r"^https?://[a-zA-Z0-9.\-]+\.(" + "|".join(TRUSTED_DOMAINS) + r")\.com(:\d+)?/"
)


class EndpointValidator:
    """Decide whether a URL is a trusted Salesforce relay target."""

    def __init__(self, pattern: re.Pattern[str] = ENDPOINT_PATTERN) -> None:
        self._pattern = pattern

    def is_allowed(self, url: str | None) -> bool:
        if not url:
            return False
        return self._pattern.match(url) is not None
