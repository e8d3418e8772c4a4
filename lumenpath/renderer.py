"""
Renderer module - drives the path integrator over the image.

Implements:
- Jittered multi-sample anti-aliasing and motion blur
- Column-parallel rendering on a thread pool
- Independent entropy-seeded random stream per column task
"""

from __future__ import annotations
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .vec3 import Color, make_rng
from .camera import Camera
from .shapes import Hittable
from .integrator import trace, MAX_DEPTH

logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: int = 600
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH
    num_threads: int = 0  # 0 = auto-detect

    def __post_init__(self):
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: Optional[RenderSettings] = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None
        self._image_lock = threading.Lock()

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        The scene must be fully built before this call; it is shared
        read-only by all worker threads.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            Linear HDR image of shape (height, width, 3), row 0 at the top
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth

        image = np.zeros((height, width, 3), dtype=np.float64)
        progress_lock = threading.Lock()
        completed = [0]

        def render_column(x: int) -> None:
            """Render column ``x`` and copy it into the image."""
            rng = make_rng()
            column: List[np.ndarray] = []

            for y in range(height):
                pixel_color = Color(0, 0, 0)
                for _ in range(samples):
                    s = (x + rng.random()) / width
                    t = (y + rng.random()) / height
                    ray = camera.get_ray(s, t, rng)
                    pixel_color = pixel_color + trace(ray, scene, rng, 0, max_depth)
                column.append(pixel_color.to_array() / samples)

            with self._image_lock:
                self._store_column(image, x, column)

            if self._progress_callback:
                with progress_lock:
                    completed[0] += 1
                    done = completed[0]
                self._progress_callback(done / width)

        logger.info(
            "Rendering %dx%d at %d spp on %d thread(s)",
            width, height, samples, self.settings.num_threads
        )
        start = time.perf_counter()

        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                # list() re-raises any worker exception here
                list(executor.map(render_column, range(width)))
        else:
            for x in range(width):
                render_column(x)

        logger.info("Render finished in %.2f s", time.perf_counter() - start)
        return image

    def _store_column(self, image: np.ndarray, x: int, column: List[np.ndarray]) -> None:
        """Copy one finished column into the image. Called with the image lock held."""
        height = image.shape[0]
        # column runs bottom-up; image rows count down from the top
        for y, color in enumerate(column):
            image[height - 1 - y, x] = color
