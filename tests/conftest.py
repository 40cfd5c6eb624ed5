"""Shared fixtures: small synthetic PNGs with distinct pixel values."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest


def make_pixels(width: int, height: int, bands: int = 4) -> np.ndarray:
    """Pixels where every (x, y) has a unique, recognisable value."""
    ys, xs = np.mgrid[0:height, 0:width]
    arr = np.empty((height, width, bands), dtype=np.uint8)
    arr[..., 0] = xs * 10
    arr[..., 1] = ys * 10
    arr[..., 2] = (xs + ys) % 256
    if bands == 4:
        arr[..., 3] = 255
    return arr


@pytest.fixture
def write_png(tmp_path: Path) -> Callable[..., Path]:
    from PIL import Image

    def _write(name: str, pixels: np.ndarray) -> Path:
        path = tmp_path / name
        Image.fromarray(pixels).save(path, format="PNG")
        return path

    return _write


@pytest.fixture
def read_pixels() -> Callable[[Path], np.ndarray]:
    from png_crop import codec

    def _read(path: Path) -> np.ndarray:
        return codec.to_array(codec.load(path))

    return _read


@pytest.fixture
def source_pixels() -> np.ndarray:
    return make_pixels(10, 10)


@pytest.fixture
def source_png(write_png, source_pixels: np.ndarray) -> Path:
    return write_png("source.png", source_pixels)


@pytest.fixture
def output_png(tmp_path: Path) -> Path:
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    return out_dir / "result.png"
