import cv2
import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(308)


@pytest.fixture
def random_image(rng):
    return rng.integers(0, 256, size=(64, 48), dtype=np.uint8)


@pytest.fixture
def low_contrast_image():
    # ten neighbouring levels, 100 pixels each
    levels = np.repeat(np.arange(100, 110, dtype=np.uint8), 100)
    return levels.reshape(20, 50)


@pytest.fixture
def gradient_png(tmp_path, low_contrast_image):
    path = str(tmp_path / "source.png")
    cv2.imwrite(path, low_contrast_image)
    return path
