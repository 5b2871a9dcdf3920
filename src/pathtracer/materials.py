from dataclasses import dataclass

import torch as t
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from pathtracer.config import device, dtype
from pathtracer.hittable import HitRecord
from pathtracer.ray import Ray
from pathtracer.vec3 import (
    as_vec3,
    dot,
    near_zero,
    random_in_unit_sphere,
    random_unit_vector,
    reflect,
    refract,
    unit_vector,
)


# eq=False keeps identity semantics, so one instance can be shared by many surfaces.
@dataclass(frozen=True, eq=False)
class Lambertian:
    albedo: Float[t.Tensor, "3"]

    def __post_init__(self):
        object.__setattr__(self, "albedo", as_vec3(self.albedo))


@dataclass(frozen=True, eq=False)
class Metal:
    albedo: Float[t.Tensor, "3"]
    fuzz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "albedo", as_vec3(self.albedo))
        object.__setattr__(self, "fuzz", max(0.0, min(float(self.fuzz), 1.0)))


@dataclass(frozen=True, eq=False)
class Dielectric:
    refraction_index: float


Material = Lambertian | Metal | Dielectric


@jaxtyped(typechecker=typechecker)
def reflectance(cosine: Float[t.Tensor, "N"], ref_idx: Float[t.Tensor, "N"]) -> Float[t.Tensor, "N"]:
    # Schlick's approximation
    r0 = ((1.0 - ref_idx) / (1.0 + ref_idx)) ** 2
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@jaxtyped(typechecker=typechecker)
def scatter(
    material: Material,
    r_in: Ray,
    hit_record: HitRecord,
    generator: t.Generator | None = None,
) -> tuple[Bool[t.Tensor, "N"], Float[t.Tensor, "N 3"], Ray]:
    """Scatters a batch of rays that all hit ``material``.

    Returns ``(scatter_mask, attenuation, scattered)``; rays whose mask is False
    were absorbed and their scattered ray is meaningless.
    """
    match material:
        case Lambertian():
            return _scatter_lambertian(material, hit_record, generator)
        case Metal():
            return _scatter_metal(material, r_in, hit_record, generator)
        case Dielectric():
            return _scatter_dielectric(material, r_in, hit_record, generator)


def _scatter_lambertian(material: Lambertian, hit_record: HitRecord, generator: t.Generator | None):
    N = len(hit_record)
    normals = hit_record.normal

    scatter_direction = normals + random_unit_vector(N, generator)

    # Catch degenerate scatter direction
    degenerate = near_zero(scatter_direction)
    scatter_direction = t.where(degenerate.unsqueeze(-1), normals, scatter_direction)

    scatter_mask = t.ones(N, dtype=t.bool, device=device)
    attenuation = material.albedo.expand(N, 3)
    return scatter_mask, attenuation, Ray(hit_record.point, scatter_direction)


def _scatter_metal(material: Metal, r_in: Ray, hit_record: HitRecord, generator: t.Generator | None):
    N = len(hit_record)
    normals = hit_record.normal

    reflected = reflect(unit_vector(r_in.direction), normals)
    direction = reflected + material.fuzz * random_in_unit_sphere(N, generator)

    # Rays reflected below the surface are absorbed
    scatter_mask = dot(direction, normals) > 0
    attenuation = material.albedo.expand(N, 3)
    return scatter_mask, attenuation, Ray(hit_record.point, direction)


def _scatter_dielectric(material: Dielectric, r_in: Ray, hit_record: HitRecord, generator: t.Generator | None):
    N = len(hit_record)
    normals = hit_record.normal
    unit_direction = unit_vector(r_in.direction)

    inverse_index = t.full((N,), 1.0 / material.refraction_index, dtype=dtype, device=device)
    index = t.full((N,), material.refraction_index, dtype=dtype, device=device)
    refraction_ratio = t.where(hit_record.front_face, inverse_index, index)

    cos_theta = t.clamp(dot(-unit_direction, normals), max=1.0)
    sin_theta = t.sqrt(t.clamp(1.0 - cos_theta**2, min=0.0))

    cannot_refract = refraction_ratio * sin_theta > 1.0
    draws = t.rand(N, generator=generator, dtype=dtype, device=device)
    should_reflect = cannot_refract | (reflectance(cos_theta, refraction_ratio) > draws)

    reflected = reflect(unit_direction, normals)
    refracted = refract(unit_direction, normals, refraction_ratio)
    direction = t.where(should_reflect.unsqueeze(-1), reflected, refracted)

    # Glass absorbs nothing
    scatter_mask = t.ones(N, dtype=t.bool, device=device)
    attenuation = t.ones((N, 3), dtype=dtype, device=device)
    return scatter_mask, attenuation, Ray(hit_record.point, direction)
