"""Точка входа: фото на паспорт и лист A4 из командной строки."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from passport_studio.config import DEFAULT_SETTINGS
from passport_studio.controllers.studio_controller import StudioController
from passport_studio.errors import PassportStudioError
from passport_studio.models.geometry import CropRegion
from passport_studio.services.sheet_service import SheetCompositor

logger = logging.getLogger("passport_studio")


def parse_crop(crop_str: str) -> CropRegion:
    """Parse crop string like '100,50,800,1028' (x,y,width,height) into a CropRegion"""
    try:
        parts = [float(p) for p in crop_str.split(",")]
    except ValueError as e:
        raise ValueError(f"Invalid crop format '{crop_str}'. Use X,Y,WIDTH,HEIGHT") from e
    if len(parts) != 4:
        raise ValueError(f"Invalid crop format '{crop_str}'. Use X,Y,WIDTH,HEIGHT")
    return CropRegion(*parts)


def build_parser() -> argparse.ArgumentParser:
    passport = DEFAULT_SETTINGS.passport_size
    p = argparse.ArgumentParser(
        prog="passport-studio",
        description=(
            f"Crop a portrait to {passport.width_px}x{passport.height_px} px "
            f"(35x45 mm @ {passport.dpi} DPI) and tile it onto an A4 print sheet"
        ),
        epilog="Example: passport-studio --crop 100,50,800,1028 --rotation -2.5 portrait.jpg",
    )
    p.add_argument("image", help="Input image file name")
    p.add_argument("--crop", type=str, default=None,
                   help="Crop rectangle in source pixels as X,Y,WIDTH,HEIGHT (default: centered)")
    p.add_argument("--zoom", type=float, default=1.0,
                   help="Zoom for the centered crop, 1..4 (ignored with --crop)")
    p.add_argument("--rotation", type=float, default=0.0,
                   help="Clockwise rotation in degrees, -30..30 (default: 0)")
    p.add_argument("--out-dir", default=".", help="Output directory (default: current)")
    p.add_argument("--format", choices=("jpeg", "png"), default="jpeg", help="Output format (default: jpeg)")
    p.add_argument("--no-guides", action="store_true", help="Do not draw cut marks on the sheet")
    p.add_argument("--preview", action="store_true",
                   help="Only show how many photos fit on the sheet")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.preview:
        try:
            layout = SheetCompositor(DEFAULT_SETTINGS).compute_layout(
                DEFAULT_SETTINGS.sheet_size, DEFAULT_SETTINGS.passport_size
            )
        except PassportStudioError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Sheet layout: {layout.columns} columns x {layout.rows} rows = {layout.count} photos")
        return 0

    logger.debug("Arguments: %s", vars(args))
    controller = StudioController(draw_guides=not args.no_guides)
    try:
        controller.load(args.image)
        if args.crop:
            controller.set_crop(parse_crop(args.crop))
        else:
            controller.set_zoom(args.zoom)
        controller.set_rotation(args.rotation)
        written = controller.export(args.out_dir, fmt=args.format)
    except (PassportStudioError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for kind, path in written.items():
        print(f"{kind}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
