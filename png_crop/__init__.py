"""Load a PNG, optionally crop it, and save the result.

Typical use::

    from png_crop import PNGCropJob

    PNGCropJob(image_path="in.png", image_output_path="out.png",
               crop_image={"x": 2, "y": 2, "width": 20, "height": 20}).run()
"""

from png_crop.config import JobConfig
from png_crop.errors import ConfigError, InvalidCropError, JobBusyError, LoadError, PNGCropError, WriteError
from png_crop.geometry import CropRect, clamp_crop
from png_crop.job import PNGCropJob

__all__ = [
    "ConfigError",
    "CropRect",
    "InvalidCropError",
    "JobBusyError",
    "JobConfig",
    "LoadError",
    "PNGCropError",
    "PNGCropJob",
    "WriteError",
    "clamp_crop",
]
