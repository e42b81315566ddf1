"""Shared logging utilities."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

SENSITIVE_HEADERS = ("authorization", "x-authorization", "x-sfdc-session")


def in_flight_marker(count: int) -> str:
    """Render the in-flight count as a row of stars."""
    return "*" * max(count, 0)


def write_outgoing_log(
    method: str,
    url: str,
    headers: dict[str, str],
    *,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single outbound request log entry."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "url": url,
        "headers": _redact_headers(headers),
    }
    return _write_json(log_root / "outgoing", payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path = CLI_LOG_FILE,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact credential headers."""
    redacted = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
