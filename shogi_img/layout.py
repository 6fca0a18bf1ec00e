"""Pixel geometry.

Pure functions mapping board squares and hand slots to pixel offsets. All
constants are calibrated to the bundled assets: a 527 x 572 board image and
53 x 56 piece sprites. Offsets are top-left corners.

Canvas layout (left to right): White's hand panel, the board, Black's hand
panel. Black's panel is bottom-aligned; White's panel is the same layout turned
180 degrees and placed at the top-left corner.
"""

from typing import Iterator, Optional, Tuple

from shogi_img.types import Hand, PieceKind, Square

Offset = Tuple[int, int]
Size = Tuple[int, int]

BOARD_WIDTH = 527
BOARD_HEIGHT = 572
BOARD_SIZE: Size = (BOARD_WIDTH, BOARD_HEIGHT)

PIECE_WIDTH = 53
PIECE_HEIGHT = 56
PIECE_SIZE: Size = (PIECE_WIDTH, PIECE_HEIGHT)

# Square pitch on the board image.
CELL_WIDTH = 57
CELL_HEIGHT = 62

# Top-left of square 9a for the highlight (flush) and the piece (inset).
HIGHLIGHT_BASE: Offset = (8, 8)
PIECE_BASE: Offset = (9, 10)
HIGHLIGHT_SIZE: Size = (55, 60)
HIGHLIGHT_COLOR = (255, 64, 64, 127)

HAND_WIDTH = 200
HAND_HEIGHT = 300
# The panel leaves a one pixel seam next to the board.
HAND_PANEL_SIZE: Size = (HAND_WIDTH - 1, HAND_HEIGHT)
HAND_BACKGROUND = (178, 147, 108, 255)
HAND_MARGIN: Offset = (20, 20)
HAND_GUTTER: Offset = (30, 10)

COUNT_FONT_SIZE = 24
COUNT_COLOR = (0, 0, 0, 255)

# Hand pieces are packed from the most valuable down; kings never appear.
HAND_ORDER: Tuple[PieceKind, ...] = (
    PieceKind.ROOK,
    PieceKind.BISHOP,
    PieceKind.GOLD,
    PieceKind.SILVER,
    PieceKind.KNIGHT,
    PieceKind.LANCE,
    PieceKind.PAWN,
)


def square_to_board_offset(square: Square, base: Offset = PIECE_BASE) -> Offset:
    """Board-image offset of ``square``. File 9 is the leftmost column."""
    base_x, base_y = base
    return (
        base_x + CELL_WIDTH * (9 - square.file),
        base_y + CELL_HEIGHT * (square.rank - 1),
    )


def board_offset_to_square(
    x: int, y: int, base: Offset = PIECE_BASE
) -> Optional[Square]:
    """Square whose pitch box (anchored at ``base``) contains pixel ``(x, y)``.

    Returns ``None`` for pixels outside the 9 x 9 grid.
    """
    column = (x - base[0]) // CELL_WIDTH
    row = (y - base[1]) // CELL_HEIGHT
    if not (0 <= column < 9 and 0 <= row < 9):
        return None
    return Square(9 - column, row + 1)


def piece_offset(square: Square) -> Offset:
    return square_to_board_offset(square, PIECE_BASE)


def highlight_offset(square: Square) -> Offset:
    return square_to_board_offset(square, HIGHLIGHT_BASE)


def hand_entries(hand: Hand) -> Iterator[Tuple[int, PieceKind, int]]:
    """Yield ``(slot, kind, count)`` for every kind held, densely packed.

    Kinds with a zero or missing count are skipped and do not consume a slot.
    """
    slot = 0
    for kind in HAND_ORDER:
        count = hand.get(kind, 0)
        if count <= 0:
            continue
        yield slot, kind, count
        slot += 1


def hand_slot_offset(slot: int, sprite_size: Size = PIECE_SIZE) -> Offset:
    """Panel offset of hand ``slot``; two sprites per row."""
    width, height = sprite_size
    return (
        HAND_MARGIN[0] + (slot % 2) * (width + HAND_GUTTER[0]),
        HAND_MARGIN[1] + (slot // 2) * (height + HAND_GUTTER[1]),
    )


def count_anchor(offset: Offset, sprite_size: Size = PIECE_SIZE) -> Offset:
    """Text origin for a hand count: right of the sprite, one glyph up from its bottom."""
    return (offset[0] + sprite_size[0], offset[1] + sprite_size[1] - COUNT_FONT_SIZE)


def canvas_size(board_size: Size = BOARD_SIZE) -> Size:
    return (board_size[0] + 2 * HAND_WIDTH, board_size[1])


def board_origin() -> Offset:
    return (HAND_WIDTH, 0)


def black_hand_origin(board_size: Size = BOARD_SIZE) -> Offset:
    return (HAND_WIDTH + board_size[0] + 1, board_size[1] - HAND_HEIGHT)


def white_hand_origin() -> Offset:
    return (0, 0)
