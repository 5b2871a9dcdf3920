import math
from typing import TextIO

import numpy as np
import torch as t
from jaxtyping import Float, Int, jaxtyped
from PIL import Image
from typeguard import typechecked as typechecker


@jaxtyped(typechecker=typechecker)
def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


@jaxtyped(typechecker=typechecker)
def to_rgb8(image: Float[t.Tensor, "h w 3"]) -> Int[t.Tensor, "h w 3"]:
    """Gamma-2 corrects averaged linear colors and quantizes them to [0, 255].

    Scaling by 256 after clamping to 0.999 keeps 255 reachable without a special
    case at exactly 1.0.
    """
    gamma_corrected = t.sqrt(image.clamp(min=0.0))
    return (256 * gamma_corrected.clamp(0.0, 0.999)).to(t.int64)


@jaxtyped(typechecker=typechecker)
def tensor_to_image(tensor: Int[t.Tensor, "h w 3"]) -> Image.Image:
    tensor = tensor.clamp(0, 255)
    array = tensor.cpu().numpy().astype(np.uint8)
    return Image.fromarray(array)


@jaxtyped(typechecker=typechecker)
def write_ppm(pixels: Int[t.Tensor, "h w 3"], stream: TextIO) -> None:
    """Writes pixels in plain-text PPM (P3), top row first."""
    height, width, _ = pixels.shape
    stream.write(f"P3\n{width} {height}\n255\n")
    for r, g, b in pixels.reshape(-1, 3).tolist():
        stream.write(f"{r} {g} {b}\n")
