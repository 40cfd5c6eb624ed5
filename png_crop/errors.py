"""Error types raised by crop jobs.

Every failure of a job surfaces as a subclass of PNGCropError so callers can
catch the whole family at once or discriminate by kind.
"""


class PNGCropError(Exception):
    """Base class for all png_crop errors."""


class ConfigError(PNGCropError, ValueError):
    """A required job option is missing or malformed."""


class LoadError(PNGCropError):
    """The source could not be read or decoded as PNG."""


class InvalidCropError(PNGCropError, ValueError):
    """The crop rectangle does not select any pixels of the source image."""


class WriteError(PNGCropError, OSError):
    """The image could not be encoded or written to the destination."""


class JobBusyError(PNGCropError, RuntimeError):
    """A job was started while a previous run of the same job is still in flight."""
