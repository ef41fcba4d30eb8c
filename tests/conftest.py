"""Shared fixtures for image processing tests."""

import pytest
from PIL import Image

from models import ConversionMode, ImageConversionConfig, SaveFormat


def gradient_image(width: int, height: int, mode: str = "RGB") -> Image.Image:
    """Horizontal gradient so resampling and encoding have real content."""
    image = Image.linear_gradient("L").resize((width, height)).convert(mode)
    if mode == "RGBA":
        alpha = Image.new("L", (width, height), 128)
        image.putalpha(alpha)
    return image


@pytest.fixture
def make_source(tmp_path):
    """Write a source image into tmp_path and return its filename."""

    def _make(name: str, width: int, height: int, mode: str = "RGB") -> str:
        gradient_image(width, height, mode).save(tmp_path / name)
        return name

    return _make


@pytest.fixture
def make_config():
    def _make(**kwargs) -> ImageConversionConfig:
        defaults = {
            "conversion_mode": ConversionMode.COLOR,
            "save_format": SaveFormat.PNG,
            "max_image_width": 1200,
        }
        defaults.update(kwargs)
        return ImageConversionConfig(**defaults)

    return _make
