"""PNG codec backed by pyvips.

Decoded images are normalised to 8-bit sRGB with an alpha band so every caller
sees the same RGBA8 pixel layout regardless of the source PNG's colour type.
"""

import contextlib
import os
import stat
import uuid
from pathlib import Path
from typing import Any

import numpy as np

from png_crop.errors import LoadError, WriteError
from png_crop.logger import get_logger

_logger = get_logger("codec")

_pyvips: Any | None = None

BUFFER_TYPES = (bytes, bytearray, memoryview)


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        # Configure pyvips caches to avoid memory growth
        with contextlib.suppress(Exception):
            pyvips.cache_set_max(0)
            pyvips.cache_set_max_mem(0)
            pyvips.cache_set_max_files(0)
        _pyvips = pyvips
    return _pyvips


def is_path(source: Any) -> bool:
    return isinstance(source, (str, os.PathLike))


def is_stream(source: Any) -> bool:
    return not isinstance(source, BUFFER_TYPES) and callable(getattr(source, "read", None))


def normalize(image: Any) -> Any:
    """Convert ``image`` to sRGB, 4 bands, uchar."""
    if image.interpretation != "srgb":
        image = image.colourspace("srgb")
    if not image.hasalpha():
        image = image.bandjoin(255)
    if image.format != "uchar":
        image = image.cast("uchar")
    return image


def load(source: Any) -> Any:
    """Decode a PNG from a path, a byte buffer or a readable binary stream.

    Pixels are decoded eagerly so a truncated or corrupt file fails here and
    not later during encoding.

    Raises:
        LoadError: If ``source`` is none of the accepted kinds, cannot be read,
            or is not a valid PNG
    """
    if not (is_path(source) or isinstance(source, BUFFER_TYPES) or is_stream(source)):
        raise LoadError("Expected a valid read path, stream, or buffer.")

    pyvips = _get_pyvips_module()
    label = os.fspath(source) if is_path(source) else f"<{type(source).__name__}>"
    try:
        if is_path(source):
            image = pyvips.Image.pngload(os.fspath(source), access="sequential")
        else:
            data = source.read() if is_stream(source) else source
            if not isinstance(data, BUFFER_TYPES):
                raise TypeError(f"stream returned {type(data).__name__}, expected bytes")
            image = pyvips.Image.pngload_buffer(bytes(data), access="sequential")
        image = normalize(image).copy_memory()
    except Exception as e:
        _logger.error("Failed to load source image %s: %s", label, e, exc_info=True)
        raise LoadError(f"Failed to load PNG from {label}: {e}") from e

    _logger.debug("loaded %s: %dx%d bands=%d", label, image.width, image.height, image.bands)
    return image


def extract(image: Any, x: int, y: int, width: int, height: int) -> Any:
    """Copy the ``width``x``height`` block at ``(x, y)`` into a new image at ``(0, 0)``."""
    return image.crop(x, y, width, height).copy_memory()


def encode(image: Any) -> bytes:
    """Encode ``image`` as PNG bytes.

    Raises:
        WriteError: If encoding fails
    """
    try:
        return image.write_to_buffer(".png")
    except Exception as e:
        _logger.error("Failed to encode %dx%d image: %s", image.width, image.height, e, exc_info=True)
        raise WriteError(f"Failed to encode PNG: {e}") from e


def write(data: bytes, output_path: str | os.PathLike) -> str:
    """Write ``data`` to ``output_path`` through a temporary sibling file.

    The destination only appears once the whole file has been written, so a
    failed write leaves nothing behind. A new file gets the usual ``0o666 & ~umask``
    mode, an existing one keeps its mode, and a symlink is written through.

    Returns:
        Path to saved file

    Raises:
        WriteError: If the destination cannot be written
    """
    target = Path(output_path)
    real_target = Path(os.path.realpath(target))
    tmp_name: str | None = None
    try:
        existing_mode = None
        with contextlib.suppress(FileNotFoundError):
            existing_mode = stat.S_IMODE(os.stat(real_target).st_mode)
        candidate = str(real_target.parent / f".{real_target.name}.{uuid.uuid4().hex[:8]}.tmp")
        # the kernel applies the umask to 0o666, as for a plain open(..., "wb")
        fd = os.open(candidate, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
        tmp_name = candidate
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if existing_mode is not None:
            os.chmod(tmp_name, existing_mode)
        os.replace(tmp_name, real_target)
    except OSError as e:
        _logger.error("Failed to write %s: %s", target, e, exc_info=True)
        if tmp_name is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
        raise WriteError(f"Failed to write {target}: {e}") from e
    return str(target)


def save(image: Any, output_path: str | os.PathLike) -> str:
    return write(encode(image), output_path)


def to_array(image: Any) -> "np.ndarray":
    """Return the pixels of ``image`` as a ``(height, width, bands)`` uint8 array."""
    if image.format != "uchar":
        image = image.cast("uchar")
    mem = image.write_to_memory()
    array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    return array.copy()
