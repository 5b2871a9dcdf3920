import argparse
import sys
import time

from tqdm import tqdm

from pathtracer.config import RenderSettings, device, make_generator
from pathtracer.renderer import render
from pathtracer.scenes import default_camera, random_scene
from pathtracer.utils import tensor_to_image, to_rgb8, write_ppm


def parse_args(argv=None) -> argparse.Namespace:
    defaults = RenderSettings()
    p = argparse.ArgumentParser(prog="pathtracer", description="Render the random sphere scene as a PPM image.")
    p.add_argument("--width", type=int, default=defaults.image_width)
    p.add_argument("--aspect-ratio", type=float, default=defaults.aspect_ratio)
    p.add_argument("--samples", type=int, default=defaults.samples_per_pixel, help="samples per pixel")
    p.add_argument("--max-depth", type=int, default=defaults.max_depth, help="maximum bounces per ray")
    p.add_argument("--batch-size", type=int, default=defaults.batch_size, help="rays traced per batch")
    p.add_argument("--seed", type=int, default=None, help="seed for a reproducible render")
    p.add_argument("--output", default="-", help="PPM output path, '-' for stdout")
    p.add_argument("--png", default=None, help="also save a PNG copy to this path")
    p.add_argument("--no-progress", action="store_true", help="hide the progress bar")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        settings = RenderSettings(
            image_width=args.width,
            aspect_ratio=args.aspect_ratio,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            batch_size=args.batch_size,
            progress=not args.no_progress,
        )
    except ValueError as e:
        tqdm.write(f"error: {e}", file=sys.stderr)
        return 2

    tqdm.write(f"Using device: {device}", file=sys.stderr)
    generator = make_generator(args.seed)
    world = random_scene(generator)
    camera = default_camera(settings.aspect_ratio)

    start = time.perf_counter()
    pixels = to_rgb8(render(world, camera, settings, generator))
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    if args.output == "-":
        write_ppm(pixels, sys.stdout)
        sys.stdout.flush()
    else:
        with open(args.output, "w") as f:
            write_ppm(pixels, f)
    if args.png:
        tensor_to_image(pixels).save(args.png)

    tqdm.write(f"Done in {elapsed_ms:.0f}ms.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
