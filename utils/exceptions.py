class ValidationError(ValueError):
    """Custom exception for validation errors."""

    pass


class FontError(RuntimeError):
    """Custom exception for font loading and resource failures."""

    pass


class RenderingError(RuntimeError):
    """Custom exception for bubble drawing failures."""

    pass


class EncodingError(RuntimeError):
    """Custom exception for raster to PNG encoding failures."""

    pass


class ClipboardError(RuntimeError):
    """Custom exception for clipboard write failures."""

    pass
