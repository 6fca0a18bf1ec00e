"""Sprite atlas loading.

The piece artwork is cut from a 4 x 8 atlas. Rows 0 and 1 hold Black's pieces
and rows 2 and 3 White's; the first row of each pair holds the unpromoted kinds
and the second the king plus the promoted kinds. Two cells per color are
padding: column 0 of the even rows and column 3 of the odd rows. Every
non-padding cell is shipped as its own PNG named by the two-digit
``<row><column>`` code, e.g. ``07.png`` for Black's pawn.

:func:`atlas_cell` is the only place that knows this arrangement; the
remapping is checked for completeness and uniqueness when the module is
imported. Loading happens once per generator: :class:`AssetBundle` gathers the
raw bytes, :class:`SpriteAtlas` decodes them. Any missing or undecodable asset
raises :class:`AssetLoadError`.
"""

import logging
import os
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, Optional, Tuple

from PIL import Image, ImageFont
from pyrsistent import pmap
from pyrsistent.typing import PMap

from shogi_img.layout import BOARD_SIZE, COUNT_FONT_SIZE, PIECE_SIZE
from shogi_img.styles import RenderStyle
from shogi_img.types import Color, Piece, PieceKind
from shogi_img.utils.image import Font

logger = logging.getLogger(__name__)

ATLAS_ROWS = 4
ATLAS_COLUMNS = 8
ASSET_ROOT_ENV = "SHOGI_IMG_ASSET_ROOT"
PACKAGE_ASSET_ROOT = os.path.join(os.path.dirname(__file__), "data")

AtlasCell = Tuple[int, int]

_UNPROMOTED_COLUMNS: Dict[PieceKind, int] = {
    PieceKind.GOLD: 1,
    PieceKind.ROOK: 2,
    PieceKind.BISHOP: 3,
    PieceKind.SILVER: 4,
    PieceKind.KNIGHT: 5,
    PieceKind.LANCE: 6,
    PieceKind.PAWN: 7,
}
_PROMOTED_COLUMNS: Dict[PieceKind, int] = {
    PieceKind.KING: 0,
    PieceKind.PRO_ROOK: 1,
    PieceKind.PRO_BISHOP: 2,
    PieceKind.PRO_SILVER: 4,
    PieceKind.PRO_KNIGHT: 5,
    PieceKind.PRO_LANCE: 6,
    PieceKind.PRO_PAWN: 7,
}


class AssetLoadError(RuntimeError):
    """An asset file or font is missing or cannot be decoded."""


def is_padding_cell(row: int, column: int) -> bool:
    return (row % 2 == 0 and column == 0) or (row % 2 == 1 and column == 3)


def atlas_cell(color: Color, kind: PieceKind) -> AtlasCell:
    """Atlas ``(row, column)`` of the sprite for ``kind`` in ``color``."""
    row = 2 * color.array_index
    if kind in _UNPROMOTED_COLUMNS:
        return row, _UNPROMOTED_COLUMNS[kind]
    return row + 1, _PROMOTED_COLUMNS[kind]


def atlas_filename(cell: AtlasCell) -> str:
    row, column = cell
    return f"{row}{column}.png"


def _validate_atlas_layout() -> None:
    seen: Dict[AtlasCell, Tuple[Color, PieceKind]] = {}
    for color in Color:
        for kind in PieceKind:
            cell = atlas_cell(color, kind)
            row, column = cell
            if not (0 <= row < ATLAS_ROWS and 0 <= column < ATLAS_COLUMNS):
                raise AssertionError(f"{color} {kind} maps outside the atlas: {cell}")
            if is_padding_cell(row, column):
                raise AssertionError(f"{color} {kind} maps to padding cell {cell}")
            if cell in seen:
                raise AssertionError(f"{color} {kind} shares {cell} with {seen[cell]}")
            seen[cell] = (color, kind)
    padding = sum(
        is_padding_cell(r, c) for r in range(ATLAS_ROWS) for c in range(ATLAS_COLUMNS)
    )
    if len(seen) != ATLAS_ROWS * ATLAS_COLUMNS - padding:
        raise AssertionError(f"Atlas map covers {len(seen)} cells")


_validate_atlas_layout()


def default_asset_root() -> str:
    """``$SHOGI_IMG_ASSET_ROOT`` if set, else the ``data`` directory in the package."""
    return os.environ.get(ASSET_ROOT_ENV) or PACKAGE_ASSET_ROOT


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise AssetLoadError(f"Cannot read asset {path}") from exc


@dataclass(frozen=True)
class AssetBundle:
    """Raw asset bytes for one style.

    Attributes:
        board: Encoded board image.
        pieces: Encoded piece sprites keyed by atlas file name (``"07.png"``).
    """

    board: bytes
    pieces: PMap[str, bytes]

    @classmethod
    def from_directory(
        cls, style: RenderStyle, asset_root: Optional[str] = None
    ) -> "AssetBundle":
        """Read the assets for ``style`` under ``asset_root``.

        Without ``asset_root`` the root is ``$SHOGI_IMG_ASSET_ROOT``, then the
        package ``data`` directory. The artwork is not bundled in source
        checkouts; in that case one of the first two must be given.
        """
        root = asset_root or default_asset_root()
        if root == PACKAGE_ASSET_ROOT and not os.path.isdir(root):
            raise AssetLoadError(
                f"No bundled assets are installed in {root}; "
                f"pass asset_root or set {ASSET_ROOT_ENV}"
            )
        board = _read_bytes(os.path.join(root, style.board_path))
        pieces_dir = os.path.join(root, style.pieces_path)
        pieces = {
            name: _read_bytes(os.path.join(pieces_dir, name))
            for name in sorted(
                {
                    atlas_filename(atlas_cell(color, kind))
                    for color in Color
                    for kind in PieceKind
                }
            )
        }
        logger.debug("Read %d piece sprites from %s", len(pieces), pieces_dir)
        return cls(board=board, pieces=pmap(pieces))


def decode_png(data: bytes, name: str) -> Image.Image:
    """Decode ``data`` to an RGBA image; ``name`` is used in error messages."""
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            return image.convert("RGBA")
    except (OSError, SyntaxError, ValueError) as exc:
        raise AssetLoadError(f"Cannot decode asset {name}") from exc


def load_font(font_path: Optional[str] = None, size: int = COUNT_FONT_SIZE) -> Font:
    """TrueType/OpenType font at ``font_path``, or Pillow's bundled font."""
    try:
        if font_path is None:
            return ImageFont.load_default(size=size)
        return ImageFont.truetype(font_path, size)
    except OSError as exc:
        raise AssetLoadError(f"Cannot load font {font_path or '<default>'}") from exc


@dataclass(frozen=True)
class SpriteAtlas:
    """Decoded board and piece sprites, shared read-only by every render.

    ``pieces[color.array_index][kind.array_index]`` is the sprite for a piece.
    """

    board: Image.Image
    pieces: Tuple[Tuple[Image.Image, ...], ...]

    @classmethod
    def from_bundle(cls, bundle: AssetBundle) -> "SpriteAtlas":
        board = decode_png(bundle.board, "board")
        if board.size != BOARD_SIZE:
            logger.warning("Board image is %s, expected %s", board.size, BOARD_SIZE)

        pieces = []
        for color in Color:
            row = []
            for kind in PieceKind:
                name = atlas_filename(atlas_cell(color, kind))
                if name not in bundle.pieces:
                    raise AssetLoadError(f"Asset bundle has no sprite {name}")
                sprite = decode_png(bundle.pieces[name], name)
                if sprite.size != PIECE_SIZE:
                    logger.warning(
                        "Sprite %s (%s %s) is %s, expected %s; it will not be drawn",
                        name,
                        color,
                        kind,
                        sprite.size,
                        PIECE_SIZE,
                    )
                row.append(sprite)
            pieces.append(tuple(row))
        return cls(board=board, pieces=tuple(pieces))

    def sprite(self, piece: Piece) -> Image.Image:
        return self.pieces[piece.color.array_index][piece.kind.array_index]
