import os

# Tests build plain CPU tensors alongside library ones.
os.environ.setdefault("PATHTRACER_DEVICE", "cpu")

import pytest  # noqa: E402

from pathtracer.config import make_generator  # noqa: E402


@pytest.fixture
def generator():
    return make_generator(1234)
