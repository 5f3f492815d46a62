"""
Logging filters: request correlation and redaction of sensitive extras.

`RequestIdFilter` stamps every record with the id of the request being served
(held in a contextvar set by `RequestIDMiddleware`), falling back to "-" for
records emitted outside a request, e.g. schema creation at startup.

`RedactFilter` masks `extra={...}` keys that must never land in log files.
Repository logs carry entity field names, so invitation tokens and identity
provider ids are on the list next to the usual credentials.
"""

import contextvars
import logging
from logging import LogRecord

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Bind `request_id` to the current context; returns a token for `reset_request_id`."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    def filter(self, record: LogRecord) -> bool:
        # An explicit extra={"request_id": ...} wins over the contextvar.
        record.request_id = getattr(record, "request_id", None) or get_request_id() or "-"
        return True


class RedactFilter(logging.Filter):
    REDACTED = "***REDACTED***"
    SENSITIVE = {
        "password",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "invitation_token",
        "keycloak_id",
    }

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.REDACTED
        return True


__all__ = [
    "set_request_id",
    "reset_request_id",
    "get_request_id",
    "RequestIdFilter",
    "RedactFilter",
]
