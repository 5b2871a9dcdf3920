import torch as t

from pathtracer.camera import Camera
from pathtracer.hittable import HittableList
from pathtracer.materials import Dielectric, Lambertian, Metal
from pathtracer.sphere import Sphere
from pathtracer.vec3 import length, random_vec, vec3


def random_scene(generator: t.Generator | None = None) -> HittableList:
    """Ground plane, a grid of small random spheres and three large ones."""
    world = HittableList()

    # Ground sphere
    ground_material = Lambertian(vec3(0.5, 0.5, 0.5))
    world.add(Sphere(vec3(0.0, -1000.0, 0.0), 1000.0, ground_material))

    # Random small spheres; they are kept clear of the metal sphere at (4, 1, 0)
    clearance_point = vec3(4.0, 0.2, 0.0)
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat, jitter_x, jitter_z = random_vec((3,), generator=generator).tolist()
            center = vec3(a + 0.9 * jitter_x, 0.2, b + 0.9 * jitter_z)
            if float(length(center - clearance_point)) <= 0.9:
                continue

            if choose_mat < 0.8:
                # Diffuse
                albedo = random_vec((3,), generator=generator) * random_vec((3,), generator=generator)
                material = Lambertian(albedo)
            elif choose_mat < 0.95:
                # Metal
                albedo = random_vec((3,), 0.5, 1.0, generator)
                fuzz = float(random_vec((1,), 0.0, 0.5, generator))
                material = Metal(albedo, fuzz)
            else:
                # Glass
                material = Dielectric(1.5)
            world.add(Sphere(center, 0.2, material))

    # Three larger spheres
    world.add(Sphere(vec3(0.0, 1.0, 0.0), 1.0, Dielectric(1.5)))
    world.add(Sphere(vec3(-4.0, 1.0, 0.0), 1.0, Lambertian(vec3(0.4, 0.2, 0.1))))
    world.add(Sphere(vec3(4.0, 1.0, 0.0), 1.0, Metal(vec3(0.7, 0.6, 0.5), 0.0)))

    return world


def default_camera(aspect_ratio: float = 16.0 / 9.0) -> Camera:
    return Camera(
        look_from=vec3(13.0, 2.0, 3.0),
        look_at=vec3(0.0, 0.0, 0.0),
        vup=vec3(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
