"""Shogi position images.

``shogi_img`` renders a Shogi position (pieces on the board, pieces in hand and
optionally the last move) to a Pillow RGBA image built from board and piece
sprites. Board finish, piece family and highlight mode are chosen with
:class:`RenderStyle` when the :class:`Generator` is built.

Sprites are read from ``asset_root``, ``$SHOGI_IMG_ASSET_ROOT`` or the
package ``data`` directory, in that order. When none holds the artwork,
building a generator raises :class:`AssetLoadError`.

    from shogi_img import Generator, PartialPosition

    image = Generator(asset_root="/srv/shogi-assets").generate(
        PartialPosition.startpos()
    )
    assert image.size == (927, 572)
"""

from shogi_img.assets import AssetBundle, AssetLoadError, SpriteAtlas
from shogi_img.position import PartialPosition, Position, PositionLike
from shogi_img.renderer import Generator, pos2img
from shogi_img.styles import BoardStyle, HighlightSquare, PiecesStyle, RenderStyle
from shogi_img.types import (
    Color,
    DropMove,
    Move,
    NormalMove,
    Piece,
    PieceKind,
    Square,
    parse_usi_move,
)

__all__ = [
    "AssetBundle",
    "AssetLoadError",
    "BoardStyle",
    "Color",
    "DropMove",
    "Generator",
    "HighlightSquare",
    "Move",
    "NormalMove",
    "PartialPosition",
    "Piece",
    "PieceKind",
    "PiecesStyle",
    "Position",
    "PositionLike",
    "RenderStyle",
    "SpriteAtlas",
    "Square",
    "parse_usi_move",
    "pos2img",
]
