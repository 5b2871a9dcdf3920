import torch as t
from jaxtyping import Bool, Float, jaxtyped
from typeguard import typechecked as typechecker

from pathtracer.hittable import HitRecord, Hittable
from pathtracer.materials import Material
from pathtracer.ray import Ray
from pathtracer.vec3 import as_vec3, dot, length_squared


@jaxtyped(typechecker=typechecker)
class Sphere(Hittable):
    def __init__(self, center: Float[t.Tensor, "3"], radius: float, material: Material):
        if not radius > 0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center: Float[t.Tensor, "3"] = as_vec3(center)
        self.radius: float = float(radius)
        self.material: Material = material

    @jaxtyped(typechecker=typechecker)
    def hit(self, ray: Ray, t_min: float, t_max: float | Float[t.Tensor, "N"]) -> HitRecord:
        N: int = len(ray)
        record = HitRecord.empty(N)

        oc: Float[t.Tensor, "N 3"] = ray.origin - self.center

        # Solve the quadratic with the half-b simplification
        a: Float[t.Tensor, "N"] = length_squared(ray.direction)
        half_b: Float[t.Tensor, "N"] = dot(oc, ray.direction)
        c: Float[t.Tensor, "N"] = length_squared(oc) - self.radius**2

        discriminant: Float[t.Tensor, "N"] = half_b**2 - a * c
        sphere_hit: Bool[t.Tensor, "N"] = discriminant >= 0
        sqrtd = t.sqrt(discriminant.clamp(min=0.0))

        # The nearer root wins whenever it lies in the window
        near_root = (-half_b - sqrtd) / a
        far_root = (-half_b + sqrtd) / a
        near_valid = sphere_hit & (near_root >= t_min) & (near_root <= t_max)
        far_valid = sphere_hit & (far_root >= t_min) & (far_root <= t_max)
        sphere_hit = near_valid | far_valid
        if not sphere_hit.any():
            return record

        root = t.where(near_valid, near_root, far_root)
        root = t.where(sphere_hit, root, record.t)
        hit_points = ray.at(t.where(sphere_hit, root, t.zeros_like(root)))
        outward_normal = (hit_points - self.center) / self.radius

        record.hit = sphere_hit
        record.t = root
        record.point = t.where(sphere_hit.unsqueeze(-1), hit_points, record.point)
        record.set_face_normal(ray.direction, outward_normal)
        record.normal = t.where(sphere_hit.unsqueeze(-1), record.normal, t.zeros_like(record.normal))
        record.front_face = record.front_face & sphere_hit
        record.material_index = t.where(sphere_hit, t.zeros_like(record.material_index), record.material_index)
        record.materials = (self.material,)
        return record

    def __repr__(self) -> str:
        return f"Sphere(center={self.center.tolist()}, radius={self.radius}, material={self.material!r})"
