"""Vector helpers over ``(..., 3)`` tensors.

Points and colors are plain vectors by convention. Every helper returns a new
tensor; the random samplers draw from ``generator`` when one is given and from
torch's global source otherwise.
"""

from typing import Sequence

import torch as t
import torch.nn.functional as F
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from pathtracer.config import device, dtype

NEAR_ZERO = 1e-8


def vec3(x: float, y: float, z: float) -> Float[t.Tensor, "3"]:
    return t.tensor([x, y, z], dtype=dtype, device=device)


def as_vec3(value: Sequence[float] | t.Tensor) -> Float[t.Tensor, "3"]:
    """Moves an existing tensor onto the working device, or builds one from a sequence."""
    if isinstance(value, t.Tensor):
        return value.to(device=device, dtype=dtype)
    return vec3(*value)


@jaxtyped(typechecker=typechecker)
def dot(u: Float[t.Tensor, "*batch 3"], v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return (u * v).sum(dim=-1)


@jaxtyped(typechecker=typechecker)
def cross(u: Float[t.Tensor, "*batch 3"], v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    return t.linalg.cross(u, v, dim=-1)


@jaxtyped(typechecker=typechecker)
def length_squared(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return (v * v).sum(dim=-1)


@jaxtyped(typechecker=typechecker)
def length(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch"]:
    return t.sqrt(length_squared(v))


@jaxtyped(typechecker=typechecker)
def unit_vector(v: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    # A zero vector has no direction; callers must not pass one.
    return v / length(v).unsqueeze(-1)


@jaxtyped(typechecker=typechecker)
def near_zero(v: Float[t.Tensor, "*batch 3"]) -> Bool[t.Tensor, "*batch"]:
    return (v.abs() < NEAR_ZERO).all(dim=-1)


@jaxtyped(typechecker=typechecker)
def reflect(v: Float[t.Tensor, "*batch 3"], n: Float[t.Tensor, "*batch 3"]) -> Float[t.Tensor, "*batch 3"]:
    return v - 2 * dot(v, n).unsqueeze(-1) * n


@jaxtyped(typechecker=typechecker)
def refract(
    uv: Float[t.Tensor, "*batch 3"],
    n: Float[t.Tensor, "*batch 3"],
    etai_over_etat: Float[t.Tensor, "*batch"],
) -> Float[t.Tensor, "*batch 3"]:
    """Bends the unit vector ``uv`` through a surface with normal ``n`` (Snell's law)."""
    cos_theta = t.clamp(dot(-uv, n), max=1.0).unsqueeze(-1)
    r_out_perp = etai_over_etat.unsqueeze(-1) * (uv + cos_theta * n)
    r_out_parallel = -t.sqrt(t.abs(1.0 - length_squared(r_out_perp))).unsqueeze(-1) * n
    return r_out_perp + r_out_parallel


def random_vec(
    shape: tuple[int, ...],
    low: float = 0.0,
    high: float = 1.0,
    generator: t.Generator | None = None,
) -> t.Tensor:
    """Uniform components in ``[low, high)``."""
    sample = t.rand(shape, generator=generator, dtype=dtype, device=device)
    return low + (high - low) * sample


def _rejection_sample(n: int, axes: int, generator: t.Generator | None) -> Float[t.Tensor, "n 3"]:
    # Draws from the [-1, 1] cube (or square) and redraws the points that land outside the unit ball.
    points = t.zeros((n, 3), dtype=dtype, device=device)
    pending = t.ones(n, dtype=t.bool, device=device)
    while pending.any():
        indices = pending.nonzero(as_tuple=False).squeeze(-1)
        candidates = random_vec((indices.numel(), axes), -1.0, 1.0, generator)
        inside = (candidates * candidates).sum(dim=-1) < 1.0
        accepted = indices[inside]
        points[accepted, :axes] = candidates[inside]
        pending[accepted] = False
    return points


@jaxtyped(typechecker=typechecker)
def random_in_unit_sphere(n: int, generator: t.Generator | None = None) -> Float[t.Tensor, "n 3"]:
    return _rejection_sample(n, 3, generator)


@jaxtyped(typechecker=typechecker)
def random_in_unit_disk(n: int, generator: t.Generator | None = None) -> Float[t.Tensor, "n 3"]:
    """Points in the unit disk of the xy plane; z is always 0."""
    return _rejection_sample(n, 2, generator)


@jaxtyped(typechecker=typechecker)
def random_unit_vector(n: int, generator: t.Generator | None = None) -> Float[t.Tensor, "n 3"]:
    return F.normalize(random_in_unit_sphere(n, generator), dim=-1)
