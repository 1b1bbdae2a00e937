"""
Convert any image Pillow can open into a .ico file
"""
import argparse
import json
import sys
from pathlib import Path

from PIL import Image

from iconfile import save_icon
from icocodec import debug_log
from icocodec.icon_encoder import ImageSize, parse_image_size, resolve_sizes
from icocodec.raster import RasterImage

# -----------------------
# Paths / persistence
# -----------------------
APP_DIR = Path(__file__).resolve().parent
SETTINGS_PATH = APP_DIR / "icon_settings.json"

DEFAULT_SETTINGS = {
    "image_size": ImageSize.ICON_256.name,
    "stack_icons": False,
    "debug": False,
}


def load_settings() -> dict:
    settings = dict(DEFAULT_SETTINGS)
    if SETTINGS_PATH.exists():
        try:
            settings.update(json.loads(SETTINGS_PATH.read_text(encoding="utf-8")))
        except Exception as e:
            print(f"Ignoring unreadable settings file {SETTINGS_PATH}: {e}")
    return settings


def save_settings(s: dict):
    current = load_settings()
    current.update(s or {})
    SETTINGS_PATH.write_text(json.dumps(current, indent=2, ensure_ascii=False), encoding="utf-8")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Save an image as a Windows .ico file")
    parser.add_argument("source", help="input image (PNG, JPEG, BMP, ...)")
    parser.add_argument("output", help="output .ico path")
    parser.add_argument("--size", help="16, 32, 48, 64, 128, 256, auto or all (default: last used)")
    parser.add_argument("--stack", dest="stack", action="store_true", default=None,
                        help="also add every smaller standard size")
    parser.add_argument("--no-stack", dest="stack", action="store_false")
    parser.add_argument("--debug", action="store_true", default=None)
    return parser


def make_icon(source, output, size=None, stack=None, verbose=False) -> tuple:
    """Save ``source`` as an icon at ``output`` and remember the options used."""
    settings = load_settings()
    selector = parse_image_size(size if size is not None else settings["image_size"])
    stack = settings["stack_icons"] if stack is None else bool(stack)

    with Image.open(source) as img:
        raster = RasterImage.from_pil(img)

    with open(output, "wb") as f:
        save_icon(raster, selector, stack, f, status_callback=print if verbose else None)

    save_settings({"image_size": selector.name, "stack_icons": stack})
    return resolve_sizes(selector, stack)


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = load_settings()
    debug = settings["debug"] if args.debug is None else args.debug
    debug_log.set_debug(debug)

    try:
        sizes = make_icon(args.source, args.output, args.size, args.stack, verbose=debug)
    except FileNotFoundError as e:
        print(f"Source not found: {e.filename}")
        return 1

    print(f"Icon saved to {args.output} (sizes: {[f'{s}x{s}' for s in sizes]})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
