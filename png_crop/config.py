from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from png_crop.errors import ConfigError
from png_crop.geometry import CropRect

# option name -> accepted spellings
_ALIASES: dict[str, tuple[str, ...]] = {
    "image_path": ("image_path", "imagePath"),
    "image_output_path": ("image_output_path", "imageOutputPath"),
    "crop_image": ("crop_image", "cropImage"),
}


def _lookup(options: Mapping[str, Any], name: str) -> Any:
    for key in _ALIASES[name]:
        if key in options:
            return options[key]
    return None


@dataclass(frozen=True)
class JobConfig:
    """Immutable settings for one crop job.

    ``image_path`` is only checked for presence here; whether it is a usable
    source is decided when the job runs.
    """

    image_path: Any
    image_output_path: str | os.PathLike
    crop_image: CropRect | None = None

    def __post_init__(self) -> None:
        if self.image_path is None:
            raise ConfigError("image_path is required")
        if self.image_output_path is None:
            raise ConfigError("image_output_path is required")
        if not isinstance(self.image_output_path, (str, os.PathLike)):
            raise ConfigError(f"image_output_path must be a path, got {type(self.image_output_path).__name__}")
        crop = self.crop_image
        if crop is not None and not isinstance(crop, CropRect):
            # frozen dataclass: coerce through object.__setattr__
            object.__setattr__(self, "crop_image", CropRect.from_mapping(crop))

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> JobConfig:
        """Build a config from ``imagePath``/``imageOutputPath``/``cropImage`` style options.

        snake_case keys are accepted as well.
        """
        if not isinstance(options, Mapping):
            raise ConfigError(f"options must be a mapping, got {type(options).__name__}")
        return cls(
            image_path=_lookup(options, "image_path"),
            image_output_path=_lookup(options, "image_output_path"),
            crop_image=_lookup(options, "crop_image") or None,
        )
