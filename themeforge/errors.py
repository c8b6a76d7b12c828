"""Error codes and error handling utilities for themeforge."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for themeforge operations."""

    # Color input errors
    COLOR_FORMAT = auto()
    PALETTE_INVALID = auto()

    # Scheme import errors
    IMPORT_MISSING_KEYS = auto()
    IMPORT_INVALID_COLORS = auto()
    IMPORT_MALFORMED = auto()

    # Image errors
    IMAGE_UNREADABLE = auto()
    IMAGE_TOO_SMALL = auto()

    # Output errors
    RENDER_FAILED = auto()
    FILE_ACCESS_DENIED = auto()

    # System integration errors
    COMMAND_MISSING = auto()
    COMMAND_FAILED = auto()
    COMMAND_TIMEOUT = auto()

    # Configuration errors
    CONFIG_INVALID = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.COLOR_FORMAT: "The color is not a valid hex value. Use #rgb or #rrggbb.",
    ErrorCode.PALETTE_INVALID: "A palette needs exactly 16 colors.",

    ErrorCode.IMPORT_MISSING_KEYS: "The color scheme is missing required keys.",
    ErrorCode.IMPORT_INVALID_COLORS: "The color scheme contains values that are not 6-digit hex colors.",
    ErrorCode.IMPORT_MALFORMED: "The color scheme file could not be parsed.",

    ErrorCode.IMAGE_UNREADABLE: "The image could not be read. It may be corrupt or in an unsupported format.",
    ErrorCode.IMAGE_TOO_SMALL: "The image does not contain enough opaque pixels to extract colors.",

    ErrorCode.RENDER_FAILED: "A template could not be rendered. The rest of the theme was still written.",
    ErrorCode.FILE_ACCESS_DENIED: "Access denied. Check folder permissions.",

    ErrorCode.COMMAND_MISSING: "A desktop command was not found. The theme files were still written.",
    ErrorCode.COMMAND_FAILED: "A desktop command failed. The theme files were still written.",
    ErrorCode.COMMAND_TIMEOUT: "A desktop command timed out.",

    ErrorCode.CONFIG_INVALID: "Configuration is invalid. Reset to defaults?",
}


@dataclass
class ThemeForgeError(Exception):
    """Base exception for themeforge with error code and context."""

    code: ErrorCode
    message: str = ""
    path: Path | None = None
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")
        if not self.suggestion and self.code in ERROR_MESSAGES:
            self.suggestion = ERROR_MESSAGES[self.code]

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"\nFile: {self.path}")
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"\nDetails: {details_str}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging or CLI display."""
        return {
            "code": self.code.name,
            "message": self.message,
            "path": str(self.path) if self.path else None,
            "details": self.details,
            "suggestion": self.suggestion,
        }


@dataclass
class FormatError(ThemeForgeError):
    """Raised for a malformed color string."""

    code: ErrorCode = ErrorCode.COLOR_FORMAT
    value: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid hex color: {self.value!r}"
        self.details.setdefault("value", self.value)
        super().__post_init__()


@dataclass
class InvalidPaletteError(ThemeForgeError):
    """Raised when a palette does not hold at least 16 colors."""

    code: ErrorCode = ErrorCode.PALETTE_INVALID
    count: int = 0

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Palette must contain 16 colors (got {self.count})"
        self.details.setdefault("count", self.count)
        super().__post_init__()


@dataclass
class MissingKeyError(ThemeForgeError):
    """Raised when an imported scheme lacks required keys. Lists all of them."""

    code: ErrorCode = ErrorCode.IMPORT_MISSING_KEYS
    keys: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Missing colors: {', '.join(self.keys)}"
        self.details.setdefault("keys", ", ".join(self.keys))
        super().__post_init__()


@dataclass
class InvalidColorError(ThemeForgeError):
    """Raised when imported scheme values are not 6-digit hex. Lists all of them."""

    code: ErrorCode = ErrorCode.IMPORT_INVALID_COLORS
    keys: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = f"Invalid hex colors: {', '.join(self.keys)}"
        self.details.setdefault("keys", ", ".join(self.keys))
        super().__post_init__()


@dataclass
class ImportFormatError(ThemeForgeError):
    """Raised when scheme text cannot be parsed at all."""

    code: ErrorCode = ErrorCode.IMPORT_MALFORMED


@dataclass
class QuantizationError(ThemeForgeError):
    """Raised when an image cannot be decoded or yields too few pixels."""

    code: ErrorCode = ErrorCode.IMAGE_UNREADABLE


@dataclass
class RenderError(ThemeForgeError):
    """Raised when a single template fails to read or write."""

    code: ErrorCode = ErrorCode.RENDER_FAILED
    file_name: str = ""

    def __post_init__(self) -> None:
        if self.file_name:
            self.details.setdefault("file", self.file_name)
        super().__post_init__()


@dataclass
class ExternalCommandError(ThemeForgeError):
    """Raised when a desktop command is absent, fails or times out."""

    code: ErrorCode = ErrorCode.COMMAND_FAILED
    command: str = ""

    def __post_init__(self) -> None:
        if self.command:
            self.details.setdefault("command", self.command)
        super().__post_init__()


def classify_exception(exc: Exception, path: Path | None = None) -> ThemeForgeError:
    """Classify a generic exception into a ThemeForgeError with appropriate code."""
    if isinstance(exc, ThemeForgeError):
        return exc
    exc_name = type(exc).__name__
    exc_str = str(exc).lower()

    if isinstance(exc, PermissionError) or "permission denied" in exc_str:
        return ThemeForgeError(ErrorCode.FILE_ACCESS_DENIED, path=path, details={"original": exc_str})
    if isinstance(exc, FileNotFoundError) and path is not None:
        return ThemeForgeError(
            ErrorCode.RENDER_FAILED,
            message=f"File not found: {path}",
            path=path,
            details={"original": exc_str},
        )
    if "timed out" in exc_str or "timeout" in exc_str:
        return ThemeForgeError(ErrorCode.COMMAND_TIMEOUT, details={"original": exc_str})

    return ThemeForgeError(
        ErrorCode.RENDER_FAILED,
        message=f"{exc_name}: {exc}",
        path=path,
        details={"original": exc_str},
    )


def format_error_for_user(error: ThemeForgeError | Exception) -> str:
    """Format an error for display to the user with actionable suggestions."""
    if isinstance(error, ThemeForgeError):
        parts = [error.message]
        if error.suggestion and error.suggestion != error.message:
            parts.append(f"\n  {error.suggestion}")
        if error.path:
            parts.append(f"\n  File: {error.path.name}")
        return "".join(parts)

    classified = classify_exception(error)
    return format_error_for_user(classified)
