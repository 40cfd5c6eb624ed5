"""Crop rectangle handling.

Pure functions, no I/O. The clamping rule shrinks a rectangle that runs past the
right or bottom edge of the image, but rejects one whose origin lies outside the
image or whose inputs are negative.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from png_crop import codec
from png_crop.errors import ConfigError, InvalidCropError
from png_crop.logger import get_logger

_logger = get_logger("geometry")

_KEYS = ("x", "y", "width", "height")


@dataclass(frozen=True)
class CropRect:
    """Region to extract, in source pixel coordinates with the origin at top-left.

    ``width``/``height`` of None mean "everything that remains from the origin".
    """

    x: int = 0
    y: int = 0
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CropRect:
        """Build a rect from a dict like ``{"x": 2, "y": 2, "width": 20, "height": 20}``.

        Missing keys take the defaults. Unknown keys are ignored.
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"crop rectangle must be a mapping, got {type(data).__name__}")
        values: dict[str, int | None] = {}
        for key in _KEYS:
            value = data.get(key)
            if value is None:
                continue
            # bool is an int subclass but never a coordinate
            if isinstance(value, bool) or not isinstance(value, int):
                if isinstance(value, float) and value.is_integer():
                    value = int(value)
                else:
                    raise ConfigError(f"crop rectangle field {key!r} must be an integer, got {value!r}")
            values[key] = value
        return cls(**values)

    def as_tuple(self) -> tuple[int, int, int | None, int | None]:
        return self.x, self.y, self.width, self.height


def effective_size(rect: CropRect, image_width: int, image_height: int) -> tuple[int, int]:
    """Width and height of ``rect`` after shrinking it to the image's right/bottom edge.

    Raises:
        InvalidCropError: If the origin or size is negative, the origin lies beyond
            the image, or nothing would remain after clamping
    """
    if rect.x < 0 or rect.y < 0:
        raise InvalidCropError(f"Crop origin cannot be negative: ({rect.x}, {rect.y}).")
    if (rect.width is not None and rect.width < 0) or (rect.height is not None and rect.height < 0):
        raise InvalidCropError("Width and height cannot be negative.")

    width = image_width - rect.x if rect.width is None else rect.width
    height = image_height - rect.y if rect.height is None else rect.height

    width = min(width, image_width - rect.x)
    height = min(height, image_height - rect.y)

    if width < 0 or height < 0:
        raise InvalidCropError("Width and height cannot be negative.")
    if width == 0 or height == 0:
        raise InvalidCropError(f"Crop region {rect.as_tuple()} is empty for image size {image_width}x{image_height}.")
    return width, height


def clamp_crop(rect: CropRect, image_width: int, image_height: int) -> CropRect:
    """Fit ``rect`` to an image of the given size.

    Args:
        rect: Requested crop rectangle
        image_width: Source image width
        image_height: Source image height

    Returns:
        CropRect with concrete width/height, shrunk to the image's right/bottom edge

    Raises:
        InvalidCropError: See :func:`effective_size`
    """
    width, height = effective_size(rect, image_width, image_height)
    return CropRect(rect.x, rect.y, width, height)


def crop(image: Any, rect: CropRect) -> Any:
    """Return a new image holding the clamped region of ``image``."""
    try:
        width, height = effective_size(rect, image.width, image.height)
    except InvalidCropError as e:
        _logger.warning("crop %s rejected for image size %dx%d: %s", rect.as_tuple(), image.width, image.height, e)
        raise
    if (width, height) != (rect.width, rect.height):
        _logger.debug("crop %s clamped to %dx%d", rect.as_tuple(), width, height)
    return codec.extract(image, rect.x, rect.y, width, height)
