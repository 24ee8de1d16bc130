"""Exceptions raised by the cladding layout pipeline."""


class LayoutError(Exception):
    """Base exception for layout errors."""
    pass


class InvalidRegionError(LayoutError):
    """Region boundary is empty, degenerate, or too small."""
    pass


class DegenerateBoundsError(LayoutError):
    """Extended bounds collapsed below the minimal width or height."""
    pass


class ElementCreationError(LayoutError):
    """The element sink could not materialize a single footprint."""
    pass


class ConfigurationError(LayoutError):
    """An option could not be interpreted (strict parsing only)."""
    pass


class LayoutCommitError(LayoutError):
    """A committing run could not be finalized by its sink."""
    pass
