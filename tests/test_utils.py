import os
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
from PIL import Image

from shogi_img.assets import atlas_cell, atlas_filename
from shogi_img.layout import BOARD_SIZE, PIECE_SIZE
from shogi_img.styles import (
    BOARD_ASSET_REGISTRY,
    PIECES_ASSET_REGISTRY,
    BoardStyle,
    PiecesStyle,
)
from shogi_img.types import Color, Piece, PieceKind

RGBA = Tuple[int, int, int, int]

# Blue channel of the sprites in each piece family.
FAMILY_BLUE: Dict[PiecesStyle, int] = {
    PiecesStyle.HITOMOJI: 200,
    PiecesStyle.HITOMOJI_GOTHIC: 120,
}

BOARD_COLORS: Dict[BoardStyle, RGBA] = {
    BoardStyle.LIGHT: (230, 200, 150, 255),
    BoardStyle.WARM: (210, 160, 100, 255),
    BoardStyle.RESIN: (240, 232, 200, 255),
}

# Transparent border around each test sprite.
SPRITE_BORDER = 2


def piece_color(piece: Piece, family: PiecesStyle = PiecesStyle.HITOMOJI) -> RGBA:
    """Distinct opaque color for every (family, color, kind)."""
    return (
        10 + 15 * piece.kind.array_index,
        40 + 120 * piece.color.array_index,
        FAMILY_BLUE[family],
        255,
    )


def make_sprite(color: RGBA, size: Tuple[int, int] = PIECE_SIZE) -> Image.Image:
    sprite = Image.new("RGBA", size, (0, 0, 0, 0))
    inner = Image.new(
        "RGBA", (size[0] - 2 * SPRITE_BORDER, size[1] - 2 * SPRITE_BORDER), color
    )
    sprite.paste(inner, (SPRITE_BORDER, SPRITE_BORDER))
    return sprite


def write_asset_tree(
    root: Path, sprite_sizes: Optional[Dict[Piece, Tuple[int, int]]] = None
) -> str:
    """Write boards and both piece families under ``root`` and return its path."""
    sprite_sizes = sprite_sizes or {}
    for style, rel_path in BOARD_ASSET_REGISTRY.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGBA", BOARD_SIZE, BOARD_COLORS[style]).save(path)
    for family, rel_dir in PIECES_ASSET_REGISTRY.items():
        pieces_dir = root / rel_dir
        pieces_dir.mkdir(parents=True, exist_ok=True)
        for color in Color:
            for kind in PieceKind:
                piece = Piece(color, kind)
                sprite = make_sprite(
                    piece_color(piece, family), sprite_sizes.get(piece, PIECE_SIZE)
                )
                sprite.save(pieces_dir / atlas_filename(atlas_cell(color, kind)))
    return os.fspath(root)


def region(
    array: np.ndarray, offset: Tuple[int, int], size: Tuple[int, int]
) -> np.ndarray:
    """Sub-array of an (H, W, 4) image array at ``offset`` (x, y) of ``size`` (w, h)."""
    x, y = offset
    w, h = size
    return array[y : y + h, x : x + w]


def expected_overlay(background: RGBA, sprite: Image.Image) -> np.ndarray:
    """Expected pixels of an opaque-or-transparent sprite over a solid background."""
    src = np.array(sprite, dtype=np.uint8)
    out = np.empty_like(src)
    out[...] = background
    opaque = src[..., 3] == 255
    out[opaque] = src[opaque]
    return out
