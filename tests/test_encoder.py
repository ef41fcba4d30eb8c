import pytest
from PIL import Image

from conftest import gradient_image
from image_processing.encoder import (
    ImageEncodeError,
    delete_stale_artifacts,
    encoder_params,
    processed_filename,
    save_processed_image,
)
from models import SaveFormat


@pytest.mark.parametrize(
    "source, save_format, expected",
    [
        ("photo.jpg", SaveFormat.PNG, "photo_processed.png"),
        ("photo.png", SaveFormat.JPEG_HIGH, "photo_processed.jpeg"),
        ("my.holiday.gif", SaveFormat.JPEG_LOW, "my.holiday_processed.jpeg"),
        ("img/cover.webp", SaveFormat.JPEG_MEDIUM, "img/cover_processed.jpeg"),
        (".png", SaveFormat.PNG, "_processed.png"),
        ("img/.hidden.jpg", SaveFormat.PNG, "img/.hidden_processed.png"),
        ("README", SaveFormat.PNG, "README_processed.png"),
    ],
)
def test_processed_filename(source, save_format, expected):
    assert processed_filename(source, save_format) == expected


def test_encoder_params_quality_table():
    assert encoder_params(SaveFormat.JPEG_HIGH) == {"quality": 85}
    assert encoder_params(SaveFormat.JPEG_MEDIUM) == {"quality": 65}
    assert encoder_params(SaveFormat.JPEG_LOW) == {"quality": 50}
    assert "quality" not in encoder_params(SaveFormat.PNG)


def test_writing_jpeg_removes_stale_png(tmp_path):
    stale = tmp_path / "a_processed.png"
    stale.write_bytes(b"old")

    output = tmp_path / "a_processed.jpeg"
    save_processed_image(output, gradient_image(16, 16), SaveFormat.JPEG_HIGH)

    assert not stale.exists()
    assert output.exists()
    with Image.open(output) as written:
        assert written.format == "JPEG"


def test_writing_png_removes_stale_jpeg(tmp_path):
    stale = tmp_path / "a_processed.jpeg"
    stale.write_bytes(b"old")

    output = tmp_path / "a_processed.png"
    save_processed_image(output, gradient_image(16, 16), SaveFormat.PNG)

    assert not stale.exists()
    with Image.open(output) as written:
        assert written.format == "PNG"


def test_cleanup_without_sibling_is_noop(tmp_path):
    other = tmp_path / "b_processed.png"
    other.write_bytes(b"unrelated")
    assert delete_stale_artifacts(tmp_path / "a_processed.jpeg") == []
    assert other.exists()


def test_lower_quality_gives_smaller_files(tmp_path):
    image = Image.effect_noise((64, 64), 64).convert("RGB")
    sizes = {}
    for save_format in (SaveFormat.JPEG_HIGH, SaveFormat.JPEG_LOW):
        output = tmp_path / f"{save_format.value}_processed.jpeg"
        save_processed_image(output, image, save_format)
        sizes[save_format] = output.stat().st_size
    assert sizes[SaveFormat.JPEG_LOW] < sizes[SaveFormat.JPEG_HIGH]


def test_png_is_lossless_and_byte_stable(tmp_path):
    image = gradient_image(32, 20, "RGBA")
    output = tmp_path / "a_processed.png"

    save_processed_image(output, image, SaveFormat.PNG)
    first = output.read_bytes()
    save_processed_image(output, image, SaveFormat.PNG)
    assert output.read_bytes() == first

    with Image.open(output) as written:
        assert written.mode == "RGBA"
        assert list(written.getdata()) == list(image.getdata())


def test_png_drops_icc_profile(tmp_path):
    image = gradient_image(8, 8)
    image.info["icc_profile"] = b"not a real profile"
    output = tmp_path / "a_processed.png"
    save_processed_image(output, image, SaveFormat.PNG)
    with Image.open(output) as written:
        assert "icc_profile" not in written.info


def test_rgba_jpeg_is_flattened_on_white(tmp_path):
    image = Image.new("RGBA", (4, 4), (0, 0, 0, 0))
    output = tmp_path / "a_processed.jpeg"
    save_processed_image(output, image, SaveFormat.JPEG_HIGH)
    with Image.open(output) as written:
        assert written.mode == "RGB"
        r, g, b = written.getpixel((1, 1))
        assert min(r, g, b) > 245


def test_encode_failure_raises(tmp_path):
    output = tmp_path / "missing" / "a_processed.jpeg"
    with pytest.raises(ImageEncodeError, match="Failed to write"):
        save_processed_image(output, gradient_image(4, 4), SaveFormat.JPEG_HIGH)
    assert not output.exists()
