"""Crop job: load a PNG, optionally crop it, save it as a new PNG.

``PNGCropJob.execute`` is the pipeline. ``run_async`` and ``run`` only schedule
it and report the outcome, as a Future or through a callback.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any

from png_crop import codec, geometry
from png_crop.config import JobConfig
from png_crop.errors import JobBusyError
from png_crop.logger import get_logger

_logger = get_logger("job")

_io_pool: ThreadPoolExecutor | None = None
_io_pool_lock = threading.Lock()


def _get_io_pool() -> ThreadPoolExecutor:
    global _io_pool
    with _io_pool_lock:
        if _io_pool is None:
            max_io = max(2, min(4, (os.cpu_count() or 2)))
            _io_pool = ThreadPoolExecutor(max_workers=max_io, thread_name_prefix="png_crop")
            _logger.debug("io pool init: workers=%s", max_io)
        return _io_pool


class PNGCropJob:
    """One load -> crop -> save operation.

    Args:
        config: Job settings. When omitted, keyword options build one:
            ``image_path``, ``image_output_path`` and optional ``crop_image``.
    """

    def __init__(self, config: JobConfig | None = None, **options: Any):
        if config is None:
            config = JobConfig.from_options(options)
        elif options:
            raise TypeError("pass either a JobConfig or keyword options, not both")
        self.config = config
        self._running = threading.Lock()

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> PNGCropJob:
        return cls(JobConfig.from_options(options))

    def execute(self) -> None:
        """Run the pipeline in the calling thread.

        Raises:
            LoadError: The source cannot be read or decoded
            InvalidCropError: The crop rectangle selects no pixels of the decoded image
            WriteError: The result cannot be encoded or written
            JobBusyError: Another run of this job is still in flight
        """
        if not self._running.acquire(blocking=False):
            raise JobBusyError("job is already running")
        try:
            cfg = self.config
            _logger.debug("job start: %s -> %s crop=%s", _describe(cfg.image_path), cfg.image_output_path, cfg.crop_image)
            image = codec.load(cfg.image_path)
            if cfg.crop_image is not None:
                image = geometry.crop(image, cfg.crop_image)
            out = codec.save(image, cfg.image_output_path)
            _logger.info("Crop saved: %s (%dx%d)", out, image.width, image.height)
        finally:
            self._running.release()

    def run_async(self, executor: Executor | None = None) -> Future:
        """Schedule :meth:`execute` and return its Future.

        The Future resolves to None, or carries the exception that stopped the run.
        """
        pool = executor if executor is not None else _get_io_pool()
        return pool.submit(self.execute)

    def run(
        self, callback: Callable[[BaseException | None], Any] | None = None, executor: Executor | None = None
    ) -> Future | None:
        """Run with a completion callback, node style.

        Without ``callback`` this blocks and raises like :meth:`execute`. With one,
        the job is scheduled through :meth:`run_async` and ``callback`` receives the
        error or None; the Future is returned.
        """
        if callback is None:
            self.execute()
            return None

        def _done(future: Future) -> None:
            callback(future.exception())

        future = self.run_async(executor)
        future.add_done_callback(_done)
        return future


def _describe(source: Any) -> str:
    if isinstance(source, codec.BUFFER_TYPES):
        return f"<{len(source)} bytes>"
    if codec.is_path(source):
        return os.fspath(source)
    return f"<{type(source).__name__}>"
