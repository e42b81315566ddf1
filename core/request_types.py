"""Shared request data types."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RelayParams:
    """Assembled parameters for an outbound request."""

    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    # Follow redirects for every method, not just GET/HEAD.
    follow_all_redirects: bool = True
    # Keep the original method on 301/302/303 instead of switching to GET.
    follow_original_method: bool = True
