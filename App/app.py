"""Site image processor - command line entry point.

Converts source images in a site directory into processed artifacts
(<name>_processed.png / .jpeg) written next to them.
"""

import argparse
import concurrent.futures as cf
import dataclasses
import logging
import os
import sys
from pathlib import Path

from config_manager import ConfigManager
from image_processing import (
    DITHER_ALGORITHMS,
    ImageEncodeError,
    ImageProcessor,
    get_dither_algorithm,
    processed_filename,
)
from models import PROCESSED_SUFFIX, ConversionMode, ImageConversionConfig, SaveFormat

IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"}


def collect_sources(root: Path) -> "list[str]":
    """List raster images directly in root, skipping generated artifacts."""
    return sorted(
        p.name
        for p in root.iterdir()
        if p.is_file()
        and p.suffix.lower() in IMAGE_EXTS
        and not p.stem.endswith(PROCESSED_SUFFIX)
    )


def process_one(processor: ImageProcessor, root: Path, source: str) -> str:
    """Convert one source and return a status line."""
    try:
        output = processor.convert_image(root, source)
    except ImageEncodeError as e:
        return f"ERR   {source}: {e}"
    if output is None:
        return f"SKIP  {source}"
    return f"DONE  {source} -> {output}"


def convert_all(
    root: Path,
    sources: "list[str]",
    config: ImageConversionConfig,
    threads: int = 1,
) -> "list[tuple[str, str]]":
    """Convert every source, one failure never stopping the others.

    Sources that map to the same artifact are only converted once, so no
    two workers ever write the same file.

    Returns:
        List of (source, status line) in input order
    """
    processor = ImageProcessor(config)
    statuses: "dict[str, str]" = {}
    work: "list[str]" = []
    claimed: "dict[str, str]" = {}
    for source in sources:
        output = os.path.normpath(processed_filename(source, config.save_format))
        if output in claimed:
            statuses[source] = f"SKIP  {source}: same output as {claimed[output]}"
            continue
        claimed[output] = source
        work.append(source)

    with cf.ThreadPoolExecutor(max_workers=max(1, threads)) as ex:
        futures = {ex.submit(process_one, processor, root, s): s for s in work}
        for fut in cf.as_completed(futures):
            statuses[futures[fut]] = fut.result()

    return [(source, statuses[source]) for source in sources]


def build_config(args: argparse.Namespace) -> ImageConversionConfig:
    """Load the config file and apply command line overrides."""
    manager = ConfigManager(Path(args.config)) if args.config else ConfigManager()
    config = manager.load()

    overrides = {}
    if args.mode is not None:
        overrides["conversion_mode"] = ConversionMode(args.mode)
    if args.format is not None:
        overrides["save_format"] = SaveFormat(args.format)
    if args.dither is not None:
        overrides["dither_algorithm"] = args.dither
    if args.threshold is not None:
        overrides["threshold"] = args.threshold
    if args.max_width is not None:
        overrides["max_image_width"] = args.max_width
    config = dataclasses.replace(config, **overrides)
    # Unknown names would otherwise only fail inside a worker
    get_dither_algorithm(config.dither_algorithm)
    return config


def main(argv: "list[str] | None" = None) -> int:
    """Run the converter over a site directory."""
    parser = argparse.ArgumentParser(
        description="Resize, convert and re-encode site images."
    )
    parser.add_argument("root", help="Directory containing the source images")
    parser.add_argument(
        "sources",
        nargs="*",
        help="Source filenames relative to root (default: every image in root)",
    )
    parser.add_argument("--config", default=None, help="Path to a JSON config file")
    parser.add_argument(
        "--mode", choices=[m.value for m in ConversionMode], help="Conversion mode"
    )
    parser.add_argument(
        "--format", choices=[f.value for f in SaveFormat], help="Output format"
    )
    parser.add_argument(
        "--dither", choices=sorted(DITHER_ALGORITHMS), help="Dither algorithm"
    )
    parser.add_argument("--threshold", type=int, help="Dither threshold (0-255)")
    parser.add_argument("--max-width", type=int, help="Maximum image width in px")
    parser.add_argument(
        "--threads", type=int, default=os.cpu_count() or 4, help="Worker threads"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    root = Path(args.root).resolve()
    if not root.is_dir():
        print(f"Directory not found: {root}", file=sys.stderr)
        return 1

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    sources = args.sources or collect_sources(root)
    print(
        f"Found {len(sources)} image(s) in {root}: mode={config.conversion_mode.value}, "
        f"format={config.save_format.value}, max width={config.max_image_width}"
    )

    results = convert_all(root, sources, config, args.threads)
    for _, status in results:
        print(status)

    return 1 if any(status.startswith("ERR") for _, status in results) else 0


if __name__ == "__main__":
    sys.exit(main())
