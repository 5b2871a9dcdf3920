import math

import torch as t
from jaxtyping import Float, jaxtyped
from typeguard import typechecked as typechecker

from pathtracer.ray import Ray
from pathtracer.utils import degrees_to_radians
from pathtracer.vec3 import as_vec3, cross, length, random_in_unit_disk, unit_vector, vec3


@jaxtyped(typechecker=typechecker)
class Camera:
    """Thin-lens camera mapping image-plane coordinates to world-space rays.

    The frame is computed once here and never changes afterwards. An
    ``aperture`` of 0 gives a pinhole camera; larger apertures blur everything
    away from the plane at ``focus_dist``.
    """

    def __init__(
        self,
        look_from: Float[t.Tensor, "3"] | None = None,
        look_at: Float[t.Tensor, "3"] | None = None,
        vup: Float[t.Tensor, "3"] | None = None,
        vfov: float = 90.0,  # vertical field of view angle, in degrees
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: float = 1.0,
    ):
        look_from = as_vec3(look_from) if look_from is not None else vec3(0.0, 0.0, 0.0)
        look_at = as_vec3(look_at) if look_at is not None else vec3(0.0, 0.0, -1.0)
        vup = as_vec3(vup) if vup is not None else vec3(0.0, 1.0, 0.0)

        if float(length(look_from - look_at)) == 0.0:
            raise ValueError("look_from and look_at must be different points")
        if aspect_ratio <= 0 or focus_dist <= 0:
            raise ValueError(f"aspect_ratio and focus_dist must be positive, got {aspect_ratio} and {focus_dist}")

        # Compute viewport dimensions
        theta: float = degrees_to_radians(vfov)
        h: float = math.tan(theta / 2)
        self.viewport_height: float = 2.0 * h
        self.viewport_width: float = aspect_ratio * self.viewport_height

        # Calculate camera basis vectors
        self.w: Float[t.Tensor, "3"] = unit_vector(look_from - look_at)
        side = cross(vup, self.w)
        if float(length(side)) == 0.0:
            raise ValueError("vup must not be parallel to the viewing direction")
        self.u: Float[t.Tensor, "3"] = unit_vector(side)
        self.v: Float[t.Tensor, "3"] = cross(self.w, self.u)

        self.origin: Float[t.Tensor, "3"] = look_from
        self.horizontal: Float[t.Tensor, "3"] = focus_dist * self.viewport_width * self.u
        self.vertical: Float[t.Tensor, "3"] = focus_dist * self.viewport_height * self.v
        self.lower_left_corner: Float[t.Tensor, "3"] = (
            self.origin - self.horizontal / 2 - self.vertical / 2 - focus_dist * self.w
        )
        self.lens_radius: float = aperture / 2

    @jaxtyped(typechecker=typechecker)
    def get_ray(
        self,
        s: Float[t.Tensor, "N"],
        v: Float[t.Tensor, "N"],
        generator: t.Generator | None = None,
    ) -> Ray:
        """Casts one ray per ``(s, v)`` pair, both in ``[0, 1]`` from the lower-left corner."""
        rd = self.lens_radius * random_in_unit_disk(s.shape[0], generator)
        offset = rd[:, 0:1] * self.u + rd[:, 1:2] * self.v

        origin = self.origin + offset
        direction = (
            self.lower_left_corner
            + s.unsqueeze(-1) * self.horizontal
            + v.unsqueeze(-1) * self.vertical
            - self.origin
            - offset
        )
        return Ray(origin, direction)
