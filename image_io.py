"""
Loading and saving images with Pillow, plus the output file name prompt.
"""
from pathlib import Path
import numpy as np
from PIL import Image as PILImage
from errors import DecodeFailure, EncodeFailure
from pixels import Image

# Locations used when nothing else is given on the command line
INPUT_PATH = Path("pre_images/playground.png")
OUTPUT_DIR = Path("post_images")
OUTPUT_SUFFIX = ".png"


def load_image(path):
    """Load an image file as RGB (alpha is dropped)."""
    path = Path(path)
    try:
        with PILImage.open(path) as img:
            arr = np.array(img.convert("RGB"))
    except OSError as err:
        # also covers FileNotFoundError and PIL.UnidentifiedImageError
        raise DecodeFailure(f"Image not found or unreadable: {path} ({err})") from err
    return Image(pixels=arr, path=path)


def save_image(image, path):
    """Write `image` as a PNG, creating the parent directory if needed."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(np.ascontiguousarray(image.pixels)).save(path, format="PNG")
    except (OSError, ValueError) as err:
        raise EncodeFailure(f"Cannot write image: {path} ({err})") from err
    return path


def output_path(stem, output_dir=OUTPUT_DIR):
    return Path(output_dir) / (stem + OUTPUT_SUFFIX)


def prompt_file_name(prompt="File name: "):
    """Read the output file name (without extension) from stdin."""
    try:
        stem = input(prompt).strip()
    except EOFError as err:
        raise EncodeFailure("No output file name given (end of input)") from err
    if not stem:
        raise EncodeFailure("No output file name given")
    return stem
