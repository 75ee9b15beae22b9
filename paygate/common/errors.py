"""Error types shared by the gateway and the provider adapter."""


class ConfigurationError(Exception):
    """Startup configuration is missing or invalid."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"missing or invalid configuration: {', '.join(fields) or 'unknown'}")


class ClientInputError(Exception):
    """Inbound request is missing a required field or has a malformed one."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        self.message = message or f"Missing or invalid field: {field}"
        super().__init__(self.message)


class UpstreamError(Exception):
    """The PayPal call failed (transport error, timeout, unreadable reply)."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class UpstreamApiError(UpstreamError):
    """PayPal answered with a non-2xx status."""

    def __init__(
        self,
        operation: str,
        status_code: int,
        name: str | None = None,
        debug_id: str | None = None,
        body: dict | None = None,
    ) -> None:
        self.status_code = status_code
        self.name = name
        self.debug_id = debug_id
        self.body = body or {}
        super().__init__(operation, f"status={status_code} name={name} debug_id={debug_id}")
