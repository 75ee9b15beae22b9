"""Structured JSON logging with request/operation context fields."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter


trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")
operation_ctx: ContextVar[str] = ContextVar("operation", default="")
resource_id_ctx: ContextVar[str] = ContextVar("resource_id", default="")


class ContextFilter(logging.Filter):
    """Inject service and correlation identifiers into every log record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        record.trace_id = trace_id_ctx.get()
        record.operation = operation_ctx.get()
        record.resource_id = resource_id_ctx.get()
        return True


def _replace_context_filter(target: logging.Filterer, context_filter: ContextFilter) -> None:
    for existing in list(target.filters):
        if isinstance(existing, ContextFilter):
            target.removeFilter(existing)
    target.addFilter(context_filter)


def configure_logging(level: str = "INFO", service_name: str = "checkout-gateway") -> None:
    """Configure root logger once per process (calling again replaces the handler).

    The context filter also sits on the `paygate` logger so its records carry
    the context fields before they reach any handler.
    """

    handler = logging.StreamHandler(sys.stdout)
    context_filter = ContextFilter(service_name)
    handler.addFilter(context_filter)
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(service_name)s %(trace_id)s %(operation)s %(resource_id)s %(message)s"
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    _replace_context_filter(root, context_filter)
    _replace_context_filter(logger, context_filter)


logger = logging.getLogger("paygate")
