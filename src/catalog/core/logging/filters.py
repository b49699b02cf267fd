"""
Logging filters.

`RequestIdFilter` stamps every record with the id of the HTTP request that
produced it. The id lives in a `contextvars.ContextVar`, so it follows the
request across awaits and tasks without leaking between concurrent requests.
Records logged outside a request get the sentinel "-".

`RedactFilter` masks values of sensitive `extra=` keys before any handler
formats them.
"""
import contextvars
import logging
from logging import LogRecord

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Bind `request_id` to the current context; keep the token to reset it later."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    def filter(self, record: LogRecord) -> bool:
        # an explicit extra={"request_id": ...} takes precedence over the context
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {
        "password",
        "secret",
        "token",
        "admin_token",
        "x-admin-token",
        "authorization",
        "database_url",
    }
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
