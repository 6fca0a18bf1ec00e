"""Command line front end: render a position to a PNG file.

    python -m shogi_img "startpos moves 7g7f 3c3d" -o board.png --highlight last_move_to
"""

import argparse
import logging
import sys
from typing import List, Optional

from shogi_img.assets import AssetLoadError
from shogi_img.position import PartialPosition, Position, PositionLike
from shogi_img.renderer import Generator
from shogi_img.styles import BoardStyle, HighlightSquare, PiecesStyle, RenderStyle

logger = logging.getLogger("shogi_img")


def parse_position(text: str) -> PositionLike:
    """SFEN, or a USI ``position`` body (``startpos ...`` / ``sfen ... moves ...``)."""
    tokens = text.split()
    if tokens and tokens[0] in ("position", "startpos", "sfen"):
        position = Position.from_usi(text)
        position.replay()
        return position
    return PartialPosition.from_sfen(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shogi_img", description="Render a Shogi position to a PNG image"
    )
    parser.add_argument(
        "position",
        nargs="?",
        default="startpos",
        help="SFEN string or USI position ('startpos moves 7g7f ...')",
    )
    parser.add_argument("-o", "--output", required=True, help="Output PNG path")
    parser.add_argument(
        "--board",
        choices=[s.value for s in BoardStyle],
        default=BoardStyle.LIGHT.value,
        help="Board finish",
    )
    parser.add_argument(
        "--pieces",
        choices=[s.value for s in PiecesStyle],
        default=PiecesStyle.HITOMOJI.value,
        help="Piece sprite family",
    )
    parser.add_argument(
        "--highlight",
        choices=[s.value for s in HighlightSquare],
        default=HighlightSquare.NONE.value,
        help="Highlight mode",
    )
    parser.add_argument("--asset-root", default=None, help="Asset directory")
    parser.add_argument("--font", default=None, help="Font file for hand counts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        position = parse_position(args.position)
    except ValueError as exc:
        logger.error("Invalid position: %s", exc)
        return 1

    style = RenderStyle.parse(args.board, args.pieces, args.highlight)
    try:
        generator = Generator(style, asset_root=args.asset_root, font_path=args.font)
    except AssetLoadError as exc:
        logger.error("%s", exc)
        return 1

    image = generator.generate(position)
    try:
        image.save(args.output, format="PNG")
    except OSError as exc:
        logger.error("Cannot write %s: %s", args.output, exc)
        return 1
    logger.info("Wrote %s (%dx%d)", args.output, image.width, image.height)
    return 0


if __name__ == "__main__":
    sys.exit(main())
