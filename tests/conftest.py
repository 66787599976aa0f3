# Ensure `import flipmetric` works from a fresh clone:
# put repo/python on sys.path so the package is importable without prior install.
import sys
from pathlib import Path

import numpy as np
import pytest


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _ensure_python_path():
    pkg_dir = _repo_root() / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


_ensure_python_path()


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: slow tests")


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def checker_rgb8():
    """16x12 RGB8 checkerboard with a colored square, row-major bytes."""
    h, w = 12, 16
    yy, xx = np.mgrid[0:h, 0:w]
    img = np.where(((xx // 4 + yy // 4) % 2 == 0)[..., None], 200, 30).astype(np.uint8)
    img = np.repeat(img, 3, axis=2)
    img[3:8, 5:11] = (220, 40, 60)
    return w, h, img.reshape(-1).tobytes()
