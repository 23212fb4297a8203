"""Exception hierarchy for the site-toolbox framework."""


class ToolboxError(Exception):
    """Base exception for all site-toolbox errors."""


class ToolError(ToolboxError):
    """Raised when a tool encounters an error during execution."""


class ValidationError(ToolboxError):
    """Raised when parameter validation fails."""


class InvalidScaleError(ValidationError):
    """Raised when the scale percentage is not a positive integer."""


class SourceNotFoundError(ToolError):
    """Raised when the source image does not exist."""


class UnsupportedFormatError(ToolError):
    """Raised when the codec cannot identify the source image."""


class CodecInvocationError(ToolError):
    """Raised when the codec fails to produce a rendition.

    Attributes:
        fmt: Name of the format being encoded (``"avif"``, ``"webp"`` ...).
        width: Target width of the failed rendition.
        breakpoint: Breakpoint being processed, ``None`` for the fallback.
    """

    def __init__(self, message: str, *, fmt: str, width: int, breakpoint: int | None = None) -> None:
        super().__init__(message)
        self.fmt = fmt
        self.width = width
        self.breakpoint = breakpoint
