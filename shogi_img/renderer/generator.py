import logging
from functools import lru_cache
from typing import List, Optional, Tuple

from PIL import Image

from shogi_img.assets import AssetBundle, SpriteAtlas, load_font
from shogi_img.layout import (
    HAND_BACKGROUND,
    HAND_PANEL_SIZE,
    HIGHLIGHT_COLOR,
    HIGHLIGHT_SIZE,
    PIECE_SIZE,
    black_hand_origin,
    board_origin,
    canvas_size,
    count_anchor,
    hand_entries,
    hand_slot_offset,
    highlight_offset,
    piece_offset,
    white_hand_origin,
)
from shogi_img.position import PositionLike
from shogi_img.styles import HighlightSquare, RenderStyle
from shogi_img.types import Color, Hand, Piece, Square
from shogi_img.utils.image import (
    Font,
    UInt8Array,
    draw_count,
    image_to_array,
    overlay,
    solid_image,
)

logger = logging.getLogger(__name__)


def generate_board(
    position: PositionLike,
    atlas: SpriteAtlas,
    highlight: Optional[Image.Image] = None,
) -> Image.Image:
    """
    Board image with pieces, and the highlight under the last move's destination.
    """
    board = atlas.board.copy()
    occupied: List[Tuple[Square, Piece]] = []
    for square in Square.all():
        piece = position.piece_at(square)
        if piece is not None:
            occupied.append((square, piece))

    last_move = position.last_move()
    if highlight is not None and last_move is not None:
        for square, _ in occupied:
            if square == last_move.to:
                overlay(board, highlight, highlight_offset(square), HIGHLIGHT_SIZE)

    for square, piece in occupied:
        overlay(board, atlas.sprite(piece), piece_offset(square), PIECE_SIZE)
    return board


def generate_hand(hand: Hand, atlas: SpriteAtlas, font: Font) -> Image.Image:
    """
    Hand panel in Black's orientation. Pieces are drawn with Black's sprites
    whichever side holds them; counts above one are written beside the sprite.
    """
    panel = solid_image(HAND_PANEL_SIZE, HAND_BACKGROUND)
    for slot, kind, count in hand_entries(hand):
        offset = hand_slot_offset(slot, PIECE_SIZE)
        sprite = atlas.sprite(Piece(Color.BLACK, kind))
        overlay(panel, sprite, offset, PIECE_SIZE)
        if count > 1:
            draw_count(panel, count_anchor(offset, PIECE_SIZE), count, font)
    return panel


def generate(
    position: PositionLike,
    atlas: SpriteAtlas,
    font: Font,
    highlight: Optional[Image.Image] = None,
) -> Image.Image:
    """
    Compose the full image: White's hand (turned 180 degrees) at the top left,
    the board in the middle, Black's hand at the bottom right.
    """
    board_size = atlas.board.size
    image = Image.new("RGBA", canvas_size(board_size))
    overlay(image, generate_board(position, atlas, highlight), board_origin())
    overlay(
        image,
        generate_hand(position.hand_of(Color.BLACK), atlas, font),
        black_hand_origin(board_size),
    )
    white_hand = generate_hand(position.hand_of(Color.WHITE), atlas, font)
    overlay(
        image,
        white_hand.transpose(Image.Transpose.ROTATE_180),
        white_hand_origin(),
    )
    return image


class Generator:
    """
    Position image generator.

    Assets are read and decoded once here; :meth:`generate` only reads them and
    draws onto a fresh canvas, so one generator can serve many positions and
    threads.

    Without ``asset_root`` or ``bundle`` the assets come from
    ``$SHOGI_IMG_ASSET_ROOT`` or the package ``data`` directory; if neither
    holds them, :class:`AssetLoadError` is raised here.

        gen = Generator(
            RenderStyle(highlight=HighlightSquare.LAST_MOVE_TO),
            asset_root="/srv/shogi-assets",
        )
        image = gen.generate(PartialPosition.startpos())
    """

    style: RenderStyle
    atlas: SpriteAtlas
    highlight: Optional[Image.Image]
    font: Font

    def __init__(
        self,
        style: Optional[RenderStyle] = None,
        asset_root: Optional[str] = None,
        font_path: Optional[str] = None,
        bundle: Optional[AssetBundle] = None,
    ):
        self.style = style or RenderStyle()
        if bundle is None:
            bundle = AssetBundle.from_directory(self.style, asset_root)
        self.atlas = SpriteAtlas.from_bundle(bundle)
        self.highlight = (
            solid_image(HIGHLIGHT_SIZE, HIGHLIGHT_COLOR)
            if self.style.highlight is HighlightSquare.LAST_MOVE_TO
            else None
        )
        self.font = load_font(font_path)
        logger.debug("Generator ready: %s", self.style)

    def generate(self, position: PositionLike) -> Image.Image:
        return generate(position, self.atlas, self.font, highlight=self.highlight)

    render = generate

    def generate_array(self, position: PositionLike) -> UInt8Array:
        """Same image as :meth:`generate`, as an (H, W, 4) uint8 array."""
        return image_to_array(self.generate(position))


@lru_cache(maxsize=1)
def default_generator() -> Generator:
    return Generator()


def pos2img(position: PositionLike) -> Image.Image:
    """Render ``position`` with the default styles.

    The shared generator reads its assets from ``$SHOGI_IMG_ASSET_ROOT`` or
    the package ``data`` directory and raises :class:`AssetLoadError` when
    neither holds them.
    """
    return default_generator().generate(position)
