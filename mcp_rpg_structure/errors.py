"""Error definitions for structure generation and import."""

from typing import Optional, Dict, Any


class StructureError(Exception):
    """Base exception for structure-related errors."""

    def __init__(
        self,
        message: str,
        code: int = -32603,
        data: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data or {}

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the error envelope returned by the tools."""
        payload: Dict[str, Any] = {
            "kind": self.kind,
            "code": self.code,
            "message": self.message,
        }

        if self.data:
            payload["data"] = self.data

        return payload


class ValidationError(StructureError):
    """Malformed input: names, kinds, tree shape, indentation."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32602, data=data)


class UnknownFormat(StructureError):
    """Unsupported format key."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32010, data=data)


class NoStructureFound(StructureError):
    """No declaration span encloses the requested position."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32011, data=data)


class MalformedField(StructureError):
    """A field value violates its type's length or initializer grammar."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32012, data=data)


class UnmatchedAggregate(StructureError):
    """An aggregate open with no matching close."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32013, data=data)


class InternalError(StructureError):
    """Error for unexpected failures."""

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=-32603, data=data)


def handle_exception(
    exception: Exception,
    default_message: str = "Internal error"
) -> Dict[str, Any]:
    """Convert any exception to an error payload.

    Args:
        exception: Exception to convert
        default_message: Message used for unexpected exceptions

    Returns:
        Error payload dictionary
    """
    if isinstance(exception, StructureError):
        return exception.to_payload()

    if isinstance(exception, (ValueError, TypeError)):
        error: StructureError = ValidationError(str(exception))
    else:
        error = InternalError(default_message, data={"original_error": str(exception)})

    return error.to_payload()
