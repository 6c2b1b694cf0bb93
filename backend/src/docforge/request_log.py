"""Request log entries and severity policy.

Maps HTTP status codes to syslog-style severities and decides, from the
configured logging level, which requests are worth a log line.
"""

import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import unquote

from starlette.requests import Request
from starlette.responses import Response

SEVERITIES = ("critical", "error", "warning", "notice", "info", "debug")

DEFAULT_LOGGING_LEVEL = "warning"

# stdlib logging has no "notice"; it lands between INFO and WARNING
LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "notice": logging.INFO + 5,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def get_log_severity(status: int) -> str:
    """Severity for a response status code."""
    if status >= 500:
        return "error"
    if status >= 400:
        return "warning"
    if status >= 300:
        return "notice"
    if status >= 200:
        return "info"
    return "debug"


def should_log_request(status: int, logging_level: str | None = None) -> bool:
    """Whether a response with this status passes the configured level.

    Unknown levels fall back to "warning".
    """
    level = logging_level or DEFAULT_LOGGING_LEVEL
    if level not in SEVERITIES:
        level = DEFAULT_LOGGING_LEVEL
    return SEVERITIES.index(get_log_severity(status)) <= SEVERITIES.index(level)


def _filter_headers(request: Request) -> dict[str, str | None]:
    headers = request.headers
    token = headers.get("x-access-token")
    return {
        "user-agent": headers.get("user-agent"),
        "origin": headers.get("origin"),
        "referer": headers.get("referer"),
        "x-access-token": token[:8] + "..." if token else "",
    }


def create_log_entry(
    request: Request,
    response: Response,
    user_id: str | None = None,
) -> dict[str, Any]:
    """Build a structured log entry for a finished request.

    Access tokens are truncated so the entry is safe to persist.
    """
    now = datetime.now(UTC).isoformat()
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    response_headers = dict(response.headers)

    return {
        "severity": get_log_severity(response.status_code),
        "user": user_id,
        "url": unquote(url),
        "method": request.method,
        "referer": request.headers.get("referer"),
        "req": {
            "ip": request.client.host if request.client else None,
            "headers": _filter_headers(request),
        },
        "res": {
            "statusCode": response.status_code,
            "requestId": response_headers.get("x-request-id"),
            "headers": response_headers,
        },
        "meta": {
            "created": now,
            "updated": now,
        },
    }


def friendly_duration(seconds: float) -> str:
    """Round a duration to its largest whole unit (e.g. "3 hours")."""
    if seconds > 86400:
        return f"{round(seconds / 86400)} days"
    if seconds > 3600:
        return f"{round(seconds / 3600)} hours"
    if seconds > 60:
        return f"{round(seconds / 60)} minutes"
    return f"{round(seconds)} seconds"
