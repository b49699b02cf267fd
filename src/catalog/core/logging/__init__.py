# src/catalog/core/logging/
# ├─ builder.py      make_dict_config(settings) + setup_logging(settings)
# ├─ formatters.py   JsonFormatter, ColorFormatter
# ├─ filters.py      RequestIdFilter, RedactFilter (+ contextvar helpers)
# ├─ handlers.py     dictConfig handler factories (console/file)
# └─ middleware.py   request id middleware

from .builder import make_dict_config, setup_logging
from .filters import RequestIdFilter, get_request_id, set_request_id
from .middleware import RequestIDMiddleware

__all__ = [
    "setup_logging",
    "make_dict_config",
    "set_request_id",
    "get_request_id",
    "RequestIdFilter",
    "RequestIDMiddleware",
]
