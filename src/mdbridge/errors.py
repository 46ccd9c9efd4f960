"""Error hierarchy for mdbridge.

Every public error class inherits from :class:`MdBridgeError`.  Each carries
a machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Conversion itself never raises: the parse and serialize drivers degrade to
inert text and record a :class:`~mdbridge.models.ConversionWarning` whose
``code`` is one of the :class:`ErrorCode` values below.  Exceptions are
reserved for misuse detected at definition time, such as registering two
extensions under the same node type name.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable codes shared by errors and conversion warnings."""

    EXTENSION_ERROR = "EXTENSION_ERROR"
    DUPLICATE_EXTENSION = "DUPLICATE_EXTENSION"
    CONVERSION_ERROR = "CONVERSION_ERROR"
    TOKENIZER_ERROR = "TOKENIZER_ERROR"
    PARSER_ERROR = "PARSER_ERROR"
    SERIALIZER_ERROR = "SERIALIZER_ERROR"
    UNKNOWN_NODE = "UNKNOWN_NODE"
    DIAGRAM_TRANSFORM_SKIPPED = "DIAGRAM_TRANSFORM_SKIPPED"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class MdBridgeError(Exception):
    """Base exception for all mdbridge errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Registration errors
# ---------------------------------------------------------------------------

class MdBridgeExtensionError(MdBridgeError):
    """An extension definition is invalid or collides with another one.

    Context keys: ``name``, ``level``.
    """

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.EXTENSION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Conversion errors
# ---------------------------------------------------------------------------

class MdBridgeConversionError(MdBridgeError):
    """A tokenizer, parser or serializer could not handle its input.

    Extensions may raise this to signal "not mine" with a reason; the
    drivers catch it (like any other exception from extension code) and
    turn it into a :class:`~mdbridge.models.ConversionWarning`.

    Context keys: ``node_type``, ``stage``.
    """

    def __init__(
        self,
        message: str = "Conversion error",
        code: str = ErrorCode.CONVERSION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )
