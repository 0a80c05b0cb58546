"""
Example: Fixing photo orientation with orientkit

This example demonstrates how to:
- Correct every image inside a ZIP archive (or a folder)
- Choose between metadata rewrite and pixel re-rendering
- Report progress and per-image failures
"""
from pathlib import Path
import logging

from orientkit import (
    BatchCorrector,
    CorrectorConfig,
    DEFAULT_ARCHIVE_NAME,
    read_orientation,
    transform_for,
)


def print_progress(completed: int, total: int):
    print(f"\r{completed}/{total} images", end="", flush=True)


def fix_archive(archive_path: Path, strategy: str = "pixel") -> Path:
    """Correct a ZIP archive and write fixed_images.zip next to it."""
    corrector = BatchCorrector(CorrectorConfig(strategy=strategy))

    result, archive = corrector.correct_archive(archive_path.read_bytes(), progress=print_progress)
    print()

    for item in result.errors:
        print(f"Failed: {item.filename} ({item.error})")
    for item in result.warnings:
        print(f"Warning: {item.filename} ({item.warning})")

    output_path = archive_path.parent / DEFAULT_ARCHIVE_NAME
    output_path.write_bytes(archive)
    print(f"{result.summary()} -> {output_path}")
    return output_path


def fix_folder(folder: Path, strategy: str = "pixel") -> Path:
    """Correct a folder of images into a 'fixed' subfolder."""
    corrector = BatchCorrector(CorrectorConfig(strategy=strategy))
    output_folder = folder / "fixed"

    result = corrector.correct_folder(folder, output_folder, progress=print_progress)
    print()
    print(f"{result.summary()} -> {output_folder}")
    return output_folder


def inspect(path: Path):
    """Print the orientation and transform of a single image."""
    code = read_orientation(path.read_bytes())
    transform = transform_for(code)
    print(f"{path.name}: orientation {code}, rotate {transform.rotation}, mirrored {transform.mirrored}")


if __name__ == "__main__":
    import sys

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if len(sys.argv) < 2:
        print("Usage: python fix_archive.py <archive.zip|folder|image.jpg> [metadata|pixel]")
        sys.exit(1)

    target = Path(sys.argv[1])
    strategy = sys.argv[2] if len(sys.argv) > 2 else "pixel"

    if not target.exists():
        print(f"Not found: {target}")
        sys.exit(1)

    if target.is_dir():
        fix_folder(target, strategy)
    elif target.suffix.lower() == ".zip":
        fix_archive(target, strategy)
    else:
        inspect(target)
