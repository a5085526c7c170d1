"""
Log events emitted by the client and a logfmt renderer for them.

Two events are logged under the ``openproject_client`` logger tree:

- ``op.request`` (DEBUG, ``openproject_client.client``): one per HTTP round
  trip, with method, url, status, duration_ms and resource.
- ``op.login`` (INFO, ``openproject_client.auth``): the cookie session login,
  with method, url and status.

Their details travel as record extras built by ``event_fields``. URLs are
passed through ``redact_url`` first, so signed tokens and keys carried in a
query string never reach a log line.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

LOGGER_NAME = "openproject_client"

EVENT_FIELDS = ("method", "url", "status", "duration_ms", "resource")

REDACTED = "redacted"
SENSITIVE_PARAMS = frozenset({"jwt", "api_key", "apikey", "token", "access_token"})


def redact_url(url: Union[httpx.URL, str]) -> str:
    """``url`` as text with credential-bearing query values replaced."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return str(url)

    for key in set(parsed.params.keys()):
        if key.lower() in SENSITIVE_PARAMS:
            parsed = parsed.copy_set_param(key, REDACTED)
    return str(parsed)


def event_fields(
    method: str,
    url: Union[httpx.URL, str],
    *,
    status: Union[int, str, None] = None,
    duration_ms: Optional[int] = None,
    resource: Optional[str] = None,
) -> Dict[str, Any]:
    """``extra=`` mapping for an ``op.request`` / ``op.login`` record."""
    fields: Dict[str, Any] = {"method": method.upper(), "url": redact_url(url)}
    if status is not None:
        fields["status"] = status
    if duration_ms is not None:
        fields["duration_ms"] = duration_ms
    if resource is not None:
        fields["resource"] = resource
    return fields


def _quote(val: Any) -> str:
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, (int, float)):
        return str(val)

    text = str(val).replace("\n", "\\n")
    if not text or any(ch in text for ch in ' ="'):
        text = '"' + text.replace('"', '\\"') + '"'
    return text


class LogfmtFormatter(logging.Formatter):
    """Renders client events as ``key=value`` pairs; missing extras are skipped."""

    def format(self, record: logging.LogRecord) -> str:
        pairs: List[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
            f"event={_quote(record.getMessage())}",
        ]
        pairs.extend(
            f"{key}={_quote(getattr(record, key))}"
            for key in EVENT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            pairs.append(f"error={record.exc_info[0].__name__}")
        return " ".join(pairs)


def setup_logging(level: str = "INFO", logger_name: str = LOGGER_NAME) -> logging.Logger:
    """Write the client's events to stderr in logfmt; safe to call repeatedly."""
    log = logging.getLogger(logger_name)
    for handler in list(log.handlers):
        if isinstance(handler.formatter, LogfmtFormatter):
            log.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    log.addHandler(handler)
    log.setLevel(getattr(logging, level.upper(), logging.INFO))
    return log


__all__ = [
    "LOGGER_NAME",
    "EVENT_FIELDS",
    "LogfmtFormatter",
    "event_fields",
    "redact_url",
    "setup_logging",
]
