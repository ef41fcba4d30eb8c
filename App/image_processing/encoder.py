"""Writing processed images to disk.

AIDEV-NOTE: At most one artifact per source may exist on disk. Siblings
written under any other known extension are deleted before each write,
whether or not the write then succeeds.
"""

import logging
import os
from pathlib import Path

from PIL import Image

from models import PROCESSED_SUFFIX, SaveFormat, known_extensions

logger = logging.getLogger(__name__)


class ImageEncodeError(RuntimeError):
    """Raised when a processed image cannot be written."""


def processed_filename(source: str, save_format: SaveFormat) -> str:
    """Derive the artifact filename for a source filename.

    Keeps any directory part of source and strips the name at its last
    dot, so a bare ".png" becomes "_processed.png".
    """
    directory, name = os.path.split(source)
    dot = name.rfind(".")
    if dot != -1:
        name = name[:dot]
    return f"{os.path.join(directory, name)}{PROCESSED_SUFFIX}{save_format.extension}"


def delete_stale_artifacts(output_path: str | Path) -> "list[Path]":
    """Delete siblings of output_path written under other extensions.

    Returns:
        Paths that were removed
    """
    output_path = Path(output_path)
    removed = []
    for extension in known_extensions():
        if extension == output_path.suffix:
            continue
        sibling = output_path.with_suffix(extension)
        if sibling.exists():
            sibling.unlink()
            logger.debug("Removed stale artifact %s", sibling)
            removed.append(sibling)
    return removed


def encoder_params(save_format: SaveFormat) -> dict:
    """Keyword arguments passed to Image.save for a format."""
    if save_format.is_lossless:
        logger.debug(
            "%s is lossless, compression quality %.2f has no effect",
            save_format.encoder,
            save_format.compression_quality,
        )
        # Do not carry an ICC profile over from the source
        return {"icc_profile": None}
    return {"quality": round(save_format.compression_quality * 100)}


def prepare_for_format(image: Image.Image, save_format: SaveFormat) -> Image.Image:
    """Convert an image into a mode the encoder can write."""
    if save_format.encoder == "JPEG":
        if image.mode == "RGBA":
            # JPEG has no alpha, composite over white
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.getchannel("A"))
            return background
        if image.mode not in ("L", "RGB"):
            return image.convert("RGB")
    return image


def save_processed_image(
    output_path: str | Path, image: Image.Image, save_format: SaveFormat
) -> None:
    """Write image to output_path in the given format.

    Args:
        output_path: Destination file, written in place
        image: Result of the conversion step
        save_format: Output encoding and quality tier

    Raises:
        ImageEncodeError: If the image cannot be encoded or written. Any
            partially written file is removed.
    """
    output_path = Path(output_path)

    # Delete old files first
    delete_stale_artifacts(output_path)

    params = encoder_params(save_format)
    prepared = prepare_for_format(image, save_format)
    logger.debug(
        "Writing %s (%dx%d, %s) as %s %s",
        output_path.name,
        prepared.width,
        prepared.height,
        prepared.mode,
        save_format.encoder,
        params,
    )

    try:
        with open(output_path, "wb") as f:
            prepared.save(f, format=save_format.encoder, **params)
    except (OSError, ValueError) as e:
        output_path.unlink(missing_ok=True)
        raise ImageEncodeError(f"Failed to write {output_path}: {e}") from e
