from typing import Any, Optional

# JSON-RPC 2.0 error codes
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ConfigurationError(RuntimeError):
    """Raised at startup when the process cannot be configured."""


class RPCError(Exception):
    """A JSON-RPC error raised by a method handler and returned to the caller."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict:
        err = {"code": self.code, "message": self.message}
        if self.data is not None:
            err["data"] = self.data
        return err


class ProviderError(Exception):
    """Base class for failures of a completion backend call."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class TransportError(ProviderError):
    """The request never produced an HTTP response (connect, DNS, timeout)."""


class RemoteError(ProviderError):
    """The backend answered with a non-2xx status."""

    def __init__(self, provider: str, status_code: int, body: str):
        super().__init__(provider, f"API error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body


class DecodeError(ProviderError):
    """The backend answered 2xx but the body did not match the expected schema."""

    def __init__(self, provider: str, reason: str, body: str):
        super().__init__(provider, f"failed to parse response: {reason}. Raw: {body}")
        self.reason = reason
        self.body = body


def describe_validation_error(e) -> str:
    """One-line summary of a pydantic ``ValidationError``."""
    msgs = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        msgs.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(msgs)
