"""Stochastic sphere path tracer on torch tensors."""

from pathtracer.camera import Camera
from pathtracer.config import RenderSettings, make_generator
from pathtracer.hittable import HitRecord, Hittable, HittableList
from pathtracer.materials import Dielectric, Lambertian, Material, Metal, scatter
from pathtracer.ray import Ray
from pathtracer.renderer import ray_color, render
from pathtracer.sphere import Sphere

__all__ = [
    "Camera",
    "Dielectric",
    "HitRecord",
    "Hittable",
    "HittableList",
    "Lambertian",
    "Material",
    "Metal",
    "Ray",
    "RenderSettings",
    "Sphere",
    "make_generator",
    "ray_color",
    "render",
    "scatter",
]
