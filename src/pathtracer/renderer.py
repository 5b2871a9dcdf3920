import torch as t
from jaxtyping import Float, Int, jaxtyped
from tqdm import tqdm
from typeguard import typechecked as typechecker

from pathtracer.camera import Camera
from pathtracer.config import RenderSettings, device, dtype
from pathtracer.hittable import Hittable
from pathtracer.materials import scatter
from pathtracer.ray import Ray
from pathtracer.vec3 import unit_vector

# Minimum hit distance for bounced rays; keeps them off the surface they leave.
T_MIN = 0.001

WHITE = (1.0, 1.0, 1.0)
SKY_BLUE = (0.5, 0.7, 1.0)


@jaxtyped(typechecker=typechecker)
def sky_color(direction: Float[t.Tensor, "N 3"]) -> Float[t.Tensor, "N 3"]:
    """Vertical gradient from white at the horizon to blue at the zenith."""
    a = 0.5 * (unit_vector(direction)[:, 1:2] + 1.0)
    white = t.tensor(WHITE, dtype=dtype, device=device)
    blue = t.tensor(SKY_BLUE, dtype=dtype, device=device)
    return (1.0 - a) * white + a * blue


@jaxtyped(typechecker=typechecker)
def ray_color(
    ray: Ray,
    world: Hittable,
    depth: int,
    generator: t.Generator | None = None,
) -> Float[t.Tensor, "N 3"]:
    """Color carried back along each ray after at most ``depth`` bounces.

    Each bounce multiplies the running attenuation by the material's. A ray
    ends on a miss (sky times attenuation), on absorption, or when the bounce
    budget runs out; the last two contribute black.
    """
    N = len(ray)
    colors = t.zeros((N, 3), dtype=dtype, device=device)
    attenuation = t.ones((N, 3), dtype=dtype, device=device)
    alive = t.arange(N, device=device)

    for _ in range(depth):
        if alive.numel() == 0:
            break

        hit_record = world.hit(ray, T_MIN, float("inf"))

        # Handle rays that did not hit anything
        missed = ~hit_record.hit
        colors[alive[missed]] = attenuation[missed] * sky_color(ray.direction[missed])

        # Handle rays that hit an object, one material at a time
        keep = hit_record.hit.clone()
        next_origin = ray.origin.clone()
        next_direction = ray.direction.clone()
        for index in hit_record.material_index[hit_record.hit].unique().tolist():
            group = hit_record.material_index == index
            scatter_mask, material_attenuation, scattered = scatter(
                hit_record.materials[index], ray[group], hit_record[group], generator
            )
            attenuation[group] = attenuation[group] * material_attenuation
            next_origin[group] = scattered.origin
            next_direction[group] = scattered.direction
            keep[group] = scatter_mask

        alive = alive[keep]
        attenuation = attenuation[keep]
        ray = Ray(next_origin[keep], next_direction[keep])

    return colors


def _pixel_rays(
    camera: Camera,
    pixel: Int[t.Tensor, "N"],
    width: int,
    height: int,
    generator: t.Generator | None,
) -> Ray:
    # Row 0 is the top scanline, which sits at v = 1.
    rows = (height - 1 - pixel // width).to(dtype)
    columns = (pixel % width).to(dtype)

    # Random offsets inside each pixel for antialiasing
    noise_u = t.rand(pixel.shape, generator=generator, dtype=dtype, device=device)
    noise_v = t.rand(pixel.shape, generator=generator, dtype=dtype, device=device)

    u = (columns + noise_u) / max(width - 1, 1)
    v = (rows + noise_v) / max(height - 1, 1)
    return camera.get_ray(u, v, generator)


@jaxtyped(typechecker=typechecker)
def render(
    world: Hittable,
    camera: Camera,
    settings: RenderSettings,
    generator: t.Generator | None = None,
) -> Float[t.Tensor, "h w 3"]:
    """Averaged linear color of every pixel, top row first.

    Rays are traced in batches of ``settings.batch_size``; the world and camera
    must not change while this runs.
    """
    samples = settings.samples_per_pixel
    h, w = settings.image_height, settings.image_width

    N = samples * h * w
    color_sums = t.zeros((h * w, 3), dtype=dtype, device=device)

    # Camera rays are built one batch at a time; flat index = sample * h * w + pixel
    batches = range(0, N, settings.batch_size)
    for i in tqdm(batches, total=len(batches), disable=not settings.progress, desc="Rendering", unit="batch"):
        pixel = t.arange(i, min(i + settings.batch_size, N), device=device) % (h * w)
        rays_batch = _pixel_rays(camera, pixel, w, h, generator)
        color_sums.index_add_(0, pixel, ray_color(rays_batch, world, settings.max_depth, generator))

    # Average over antialiasing samples
    return (color_sums / samples).view(h, w, 3)
