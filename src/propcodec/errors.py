"""
Error taxonomy for propcodec.

Every error raised by the parser, the scalar converter and the two
structural engines derives from PropertiesError, so callers can catch one
type. Errors carry the offending key path and raw value:

    FormatError: "b[1]": invalid int "x"

Converter errors are raised without a path. The engines re-raise them
through `at(path)` once the absolute key path is known.
"""

from typing import Optional


class PropertiesError(Exception):
    """Base class for all propcodec errors."""

    def __init__(self, reason: str, path: Optional[str] = None, value: Optional[str] = None):
        self.reason = reason
        self.path = path
        self.value = value
        super().__init__(self._message())

    def _message(self) -> str:
        if self.path is None:
            return self.reason
        return f'"{self.path}": {self.reason}'

    def at(self, path: str) -> "PropertiesError":
        """Return a copy of this error located at `path`."""
        return type(self)(self.reason, path=path, value=self.value)


class ParseError(PropertiesError, ValueError):
    """Raised when properties text is malformed."""

    def __init__(self, reason: str, line_number: int = 0, line: str = ""):
        self.line_number = line_number
        self.line = line
        super().__init__(reason, value=line or None)

    def _message(self) -> str:
        return f"line {self.line_number}: {self.reason}: {self.line!r}"

    def at(self, path: str) -> "ParseError":
        return self


class FormatError(PropertiesError, ValueError):
    """Raised when text does not match the grammar of its target kind."""
    pass


class RangeError(PropertiesError, ValueError):
    """Raised when a numeric value does not fit the target width or sign."""
    pass


class UnsupportedTypeError(PropertiesError, TypeError):
    """Raised when a type (or a value) has no recognized kind."""
    pass


class PathConflictError(PropertiesError):
    """Raised when one key path is used both as a leaf and as a parent."""
    pass


__all__ = [
    "PropertiesError",
    "ParseError",
    "FormatError",
    "RangeError",
    "UnsupportedTypeError",
    "PathConflictError",
]
