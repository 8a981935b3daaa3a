"""
Renderer module - the heart of the path tracer.

Implements:
- Unidirectional path tracing with light importance sampling
- Sample-split parallel rendering (every worker renders the whole image)
- Gamma correction and 8-bit output
"""

from __future__ import annotations
import logging
import math
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from . import sampling
from .vec3 import Color, de_nan
from .ray import Ray
from .camera import Camera
from .shapes import Hittable
from .bvh import build_bvh
from .pdf import HittablePDF, MixturePDF
from .scene import Scene

logger = logging.getLogger(__name__)


class MissingMaterialError(RuntimeError):
    """Raised when a ray hits a surface that has no material attached."""
    pass


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: int = 600
    samples_per_pixel: int = 100
    max_depth: int = 50
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None
    background_color: Optional[Color] = None  # None = use the scene's
    t_min: float = 0.001
    share_bvh: bool = False
    gamma: float = 2.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must not be negative, got {self.num_threads}")
        if self.gamma <= 0:
            raise ValueError(f"gamma must be positive, got {self.gamma}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 1


def split_samples(total: int, workers: int) -> List[int]:
    """Divide `total` samples per pixel between `workers` as evenly as possible.

    The first `total % workers` workers take one extra sample, so the
    counts always add up to `total`.
    """
    base, extra = divmod(total, workers)
    return [base + (1 if i < extra else 0) for i in range(workers)]


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None
        self.background = self.settings.background_color
        if self.background is None:
            self.background = Color(0.0, 0.0, 0.0)

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Scene, camera: Camera) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Every worker renders the full frame with its share of the samples
        and publishes an unnormalized sum; the sums are merged here.

        Args:
            scene: The scene to render. Read only for the whole pass.
            camera: The camera to render from

        Returns:
            Linear HDR image of shape (height, width, 3), row 0 at the top

        Raises:
            BVHBuildError: If the scene holds unbounded geometry
            MissingMaterialError: If a traced ray hits a surface without a material
        """
        settings = self.settings
        width = settings.width
        height = settings.height
        total_samples = settings.samples_per_pixel

        workers = settings.num_threads
        if total_samples < workers:
            logger.warning(
                "Only %d samples per pixel requested; using %d workers instead of %d",
                total_samples, total_samples, workers
            )
            workers = total_samples

        counts = split_samples(total_samples, workers)
        if settings.seed is not None:
            seeds: List[Optional[int]] = sampling.spawn_seeds(settings.seed, workers)
        else:
            seeds = [None] * workers

        if settings.background_color is None:
            self.background = scene.background
        lights = scene.lights if scene.has_lights else None
        shared_world = build_bvh(scene.objects) if settings.share_bvh else None

        logger.info(
            "Rendering %dx%d at %d spp with %d workers (seed=%s)",
            width, height, total_samples, workers, settings.seed
        )
        start = time.perf_counter()

        results: List[Optional[np.ndarray]] = [None] * workers
        results_lock = threading.Lock()
        rows_done = [0]
        total_rows = workers * height

        def render_pass(index: int) -> None:
            """Render the whole image with this worker's share of samples."""
            sampling.seed(seeds[index])
            world = shared_world if shared_world is not None else build_bvh(scene.objects)
            samples = counts[index]
            logger.debug("Worker %d started (%d samples per pixel)", index, samples)

            buffer = np.zeros((height, width, 3), dtype=np.float64)
            nan_samples = 0

            for row in range(height):
                # Image rows run top to bottom, the image plane bottom to top
                j = height - 1 - row
                for i in range(width):
                    pixel = np.zeros(3, dtype=np.float64)
                    for _ in range(samples):
                        s = (i + sampling.random_double()) / width
                        t = (j + sampling.random_double()) / height
                        color = self.ray_color(camera.get_ray(s, t), world, lights, 0)
                        if color.has_nan():
                            nan_samples += 1
                            color = de_nan(color)
                        pixel += color.to_array()
                    buffer[row, i] = pixel

                if self._progress_callback:
                    with results_lock:
                        rows_done[0] += 1
                        progress = rows_done[0] / total_rows
                    self._progress_callback(progress)

            if nan_samples:
                logger.warning("Worker %d replaced NaN components in %d samples", index, nan_samples)

            with results_lock:
                results[index] = buffer
            logger.debug("Worker %d finished", index)

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(render_pass, i) for i in range(workers)]
                for i, future in enumerate(futures):
                    try:
                        future.result()
                    except Exception as exc:
                        logger.error("Render worker %d failed: %s", i, exc)
                        raise
        else:
            render_pass(0)

        image = np.zeros((height, width, 3), dtype=np.float64)
        for buffer in results:
            image += buffer
        image /= total_samples

        logger.info(
            "Merged %d worker buffers; render took %.2f seconds",
            workers, time.perf_counter() - start
        )
        return image

    def ray_color(self, ray: Ray, world: Hittable, lights: Optional[Hittable], depth: int) -> Color:
        """Estimate the radiance arriving along a ray.

        Args:
            ray: The ray to trace
            world: The scene geometry (usually a BVH)
            lights: Shapes to importance sample towards, or None
            depth: Number of bounces already taken

        Returns:
            The estimated radiance. May contain NaN components, which the
            caller discards.

        Raises:
            MissingMaterialError: If the closest hit has no material
        """
        hit = world.hit(ray, self.settings.t_min, math.inf)
        if hit is None:
            return self.background

        material = hit.material
        if material is None:
            raise MissingMaterialError(f"Ray hit a surface without a material at {hit.point}")

        emitted = material.emitted(ray, hit, hit.u, hit.v, hit.point)
        if depth >= self.settings.max_depth:
            return emitted

        record = material.scatter(ray, hit)
        if record is None:
            return emitted

        if record.is_specular:
            return emitted + record.attenuation * self.ray_color(
                record.scattered_ray, world, lights, depth + 1
            )

        if record.pdf is None:
            scattered = record.scattered_ray
            pdf_value = record.pdf_value
        else:
            if lights is not None:
                pdf = MixturePDF(HittablePDF(lights, hit.point), record.pdf)
            else:
                pdf = record.pdf
            scattered = Ray(hit.point, pdf.generate())
            pdf_value = pdf.value(scattered.direction)

        if pdf_value <= 0.0:
            return emitted

        scattering_pdf = material.scattering_pdf(ray, hit, scattered)
        incoming = self.ray_color(scattered, world, lights, depth + 1)
        return emitted + record.attenuation * incoming * (scattering_pdf / pdf_value)

    def to_display(self, hdr_image: np.ndarray) -> np.ndarray:
        """Gamma correct and clamp a linear image to [0, 1]."""
        corrected = np.power(np.clip(hdr_image, 0, None), 1.0 / self.settings.gamma)
        return np.clip(corrected, 0.0, 1.0)

    def to_ldr(self, hdr_image: np.ndarray) -> np.ndarray:
        """Convert HDR image to 8-bit LDR with gamma correction.

        Args:
            hdr_image: HDR image array (float64)

        Returns:
            LDR image as uint8 array
        """
        return (255.99 * self.to_display(hdr_image)).astype(np.uint8)

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file.

        Args:
            image: Image array (linear HDR float, or already quantized uint8)
            filename: Output filename (extension determines format)
        """
        from PIL import Image as PILImage

        if image.dtype == np.float64 or image.dtype == np.float32:
            image = self.to_ldr(image)

        PILImage.fromarray(image).save(filename)
        logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filename)


def render(
    scene: Scene,
    camera: Camera,
    image_width: int,
    image_height: int,
    samples_per_pixel: int,
    worker_count: int,
    seed: Optional[int] = None,
    max_depth: int = 50
) -> np.ndarray:
    """Render a scene to a display-ready buffer.

    Args:
        scene: The scene to render
        camera: The camera to render from
        image_width: Width in pixels
        image_height: Height in pixels
        samples_per_pixel: Total samples per pixel across all workers
        worker_count: Number of worker threads
        seed: Root seed for reproducible output, or None
        max_depth: Bounce limit

    Returns:
        Array of shape (image_height, image_width, 3) of RGB values in [0, 1]
    """
    settings = RenderSettings(
        width=image_width,
        height=image_height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        num_threads=worker_count,
        seed=seed
    )
    renderer = Renderer(settings)
    return renderer.to_display(renderer.render(scene, camera))
