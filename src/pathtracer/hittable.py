from abc import ABC, abstractmethod
from typing import Iterable

import torch as t
from jaxtyping import Bool, Float, Int, jaxtyped
from typeguard import typechecked as typechecker

from pathtracer.config import device, dtype
from pathtracer.ray import Ray
from pathtracer.vec3 import dot


@jaxtyped(typechecker=typechecker)
class HitRecord:
    """Class to register ray-object intersections.

    ``material_index`` points into ``materials``, the palette of material
    objects the record was built from, and is -1 where the ray missed.
    """

    def __init__(
        self,
        hit: Bool[t.Tensor, "N"],
        point: Float[t.Tensor, "N 3"],
        normal: Float[t.Tensor, "N 3"],
        t: Float[t.Tensor, "N"],
        front_face: Bool[t.Tensor, "N"],
        material_index: Int[t.Tensor, "N"],
        materials: tuple = (),
    ):
        self.hit = hit
        self.point = point
        self.normal = normal
        self.t = t
        self.front_face = front_face
        self.material_index = material_index
        self.materials = materials

    @jaxtyped(typechecker=typechecker)
    def set_face_normal(
        self,
        ray_direction: Float[t.Tensor, "N 3"],
        outward_normal: Float[t.Tensor, "N 3"],
    ) -> None:
        """Determines whether the hit is from the outside or inside."""
        self.front_face = dot(ray_direction, outward_normal) < 0
        self.normal = t.where(self.front_face.unsqueeze(-1), outward_normal, -outward_normal)

    @staticmethod
    def empty(n: int) -> "HitRecord":
        """Creates a record of ``n`` misses."""
        return HitRecord(
            hit=t.zeros(n, dtype=t.bool, device=device),
            point=t.zeros((n, 3), dtype=dtype, device=device),
            normal=t.zeros((n, 3), dtype=dtype, device=device),
            t=t.full((n,), float("inf"), dtype=dtype, device=device),
            front_face=t.zeros(n, dtype=t.bool, device=device),
            material_index=t.full((n,), -1, dtype=t.long, device=device),
        )

    def material_at(self, i: int):
        index = int(self.material_index[i])
        return self.materials[index] if index >= 0 else None

    def __len__(self) -> int:
        return self.hit.shape[0]

    def __getitem__(self, index) -> "HitRecord":
        return HitRecord(
            hit=self.hit[index],
            point=self.point[index],
            normal=self.normal[index],
            t=self.t[index],
            front_face=self.front_face[index],
            material_index=self.material_index[index],
            materials=self.materials,
        )


@jaxtyped(typechecker=typechecker)
class Hittable(ABC):
    """Abstract class for hittable objects."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float | Float[t.Tensor, "N"]) -> HitRecord:
        """Nearest intersection per ray with distance inside ``[t_min, t_max]``.

        ``t_max`` may be a per-ray bound.
        """


@jaxtyped(typechecker=typechecker)
class HittableList(Hittable):
    """List of hittable objects, itself hittable."""

    def __init__(self, objects: Iterable[Hittable] | None = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []

    def add(self, object: Hittable) -> None:
        self.objects.append(object)

    def clear(self) -> None:
        self.objects.clear()

    def __len__(self) -> int:
        return len(self.objects)

    @jaxtyped(typechecker=typechecker)
    def hit(self, ray: Ray, t_min: float, t_max: float | Float[t.Tensor, "N"]) -> HitRecord:
        N: int = len(ray)
        record = HitRecord.empty(N)
        closest_so_far = t.full((N,), float("inf"), dtype=dtype, device=device)
        closest_so_far = t.minimum(closest_so_far, t.as_tensor(t_max, dtype=dtype, device=device))
        materials: list = []

        for obj in self.objects:
            # Narrowing the window means any reported hit is the closest so far.
            obj_record = obj.hit(ray, t_min, closest_so_far)
            closer = obj_record.hit
            closest_so_far = t.where(closer, obj_record.t, closest_so_far)

            record.hit = record.hit | closer
            record.point = t.where(closer.unsqueeze(-1), obj_record.point, record.point)
            record.normal = t.where(closer.unsqueeze(-1), obj_record.normal, record.normal)
            record.t = t.where(closer, obj_record.t, record.t)
            record.front_face = t.where(closer, obj_record.front_face, record.front_face)
            record.material_index = t.where(
                closer, obj_record.material_index + len(materials), record.material_index
            )
            materials.extend(obj_record.materials)

        record.materials = tuple(materials)
        return record
