import io
import math

import pytest
import torch as t

from pathtracer.utils import degrees_to_radians, tensor_to_image, to_rgb8, write_ppm


def test_degrees_to_radians():
    assert degrees_to_radians(180.0) == pytest.approx(math.pi)


def test_to_rgb8_gamma_and_quantization():
    image = t.tensor([[[0.0, 0.25, 1.0], [4.0, 0.01, 0.998]]])
    pixels = to_rgb8(image)
    # sqrt, clamp to [0, 0.999], times 256, truncate
    assert pixels.tolist() == [[[0, 128, 255], [255, 25, 255]]]
    assert pixels.dtype == t.int64


def test_ppm_header_and_pixel_lines():
    pixels = t.tensor([[[255, 0, 0], [0, 128, 7]]])
    stream = io.StringIO()
    write_ppm(pixels, stream)
    text = stream.getvalue()
    assert text.startswith("P3\n2 1\n255\n")
    assert text[len("P3\n2 1\n255\n"):] == "255 0 0\n0 128 7\n"


def test_ppm_rows_are_written_top_to_bottom():
    pixels = t.tensor([[[1, 1, 1]], [[2, 2, 2]]])
    stream = io.StringIO()
    write_ppm(pixels, stream)
    assert stream.getvalue().splitlines()[3:] == ["1 1 1", "2 2 2"]


def test_tensor_to_image():
    pixels = t.tensor([[[255, 0, 0], [0, 0, 255]]])
    image = tensor_to_image(pixels)
    assert image.size == (2, 1)
    assert image.mode == "RGB"
    assert image.getpixel((1, 0)) == (0, 0, 255)
