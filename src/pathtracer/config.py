import os
from dataclasses import dataclass

import torch as t

device = t.device(os.environ.get("PATHTRACER_DEVICE") or ("cuda" if t.cuda.is_available() else "cpu"))
dtype = t.float32


def make_generator(seed: int | None = None) -> t.Generator:
    """Creates a random source on the working device, seeded when a seed is given."""
    generator = t.Generator(device=device)
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator


@dataclass(frozen=True)
class RenderSettings:
    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 10
    max_depth: int = 50
    batch_size: int = 10_000
    progress: bool = True

    def __post_init__(self):
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth cannot be negative, got {self.max_depth}")
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    @property
    def image_height(self) -> int:
        return max(1, int(self.image_width / self.aspect_ratio))
