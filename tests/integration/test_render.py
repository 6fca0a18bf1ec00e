from pathlib import Path

import numpy as np
import pytest
from pyrsistent import pmap

from shogi_img import assets
from shogi_img.assets import ASSET_ROOT_ENV, AssetLoadError
from shogi_img.layout import (
    BOARD_SIZE,
    HAND_BACKGROUND,
    HAND_PANEL_SIZE,
    HIGHLIGHT_SIZE,
    PIECE_SIZE,
    black_hand_origin,
    board_origin,
    canvas_size,
    count_anchor,
    hand_slot_offset,
    highlight_offset,
    piece_offset,
)
from shogi_img.position import PartialPosition, Position
from shogi_img.renderer import Generator
from shogi_img.renderer.generator import (
    default_generator,
    generate_board,
    generate_hand,
    pos2img,
)
from shogi_img.styles import BoardStyle, HighlightSquare, PiecesStyle, RenderStyle
from shogi_img.types import Color, NormalMove, Piece, PieceKind, Square
from tests.test_utils import (
    BOARD_COLORS,
    expected_overlay,
    piece_color,
    region,
    write_asset_tree,
)

BOARD_COLOR = BOARD_COLORS[BoardStyle.LIGHT]
CENTER = Square(5, 5)


def with_hands(
    black: dict[PieceKind, int] | None = None, white: dict[PieceKind, int] | None = None
) -> PartialPosition:
    return PartialPosition(
        hands=pmap({Color.BLACK: pmap(black or {}), Color.WHITE: pmap(white or {})})
    )


def to_canvas(offset: tuple[int, int]) -> tuple[int, int]:
    """Board-image offset to canvas offset."""
    return offset[0] + board_origin()[0], offset[1] + board_origin()[1]


def empty_canvas() -> np.ndarray:
    """Expected pixels for a position with no pieces and empty hands."""
    width, height = canvas_size(BOARD_SIZE)
    expected = np.zeros((height, width, 4), dtype=np.uint8)
    bx, by = board_origin()
    expected[by : by + BOARD_SIZE[1], bx : bx + BOARD_SIZE[0]] = BOARD_COLOR
    hx, hy = black_hand_origin(BOARD_SIZE)
    pw, ph = HAND_PANEL_SIZE
    expected[hy : hy + ph, hx : hx + pw] = HAND_BACKGROUND
    expected[0:ph, 0:pw] = HAND_BACKGROUND
    return expected


@pytest.fixture(scope="module")
def asset_root(tmp_path_factory: pytest.TempPathFactory) -> str:
    return write_asset_tree(tmp_path_factory.mktemp("assets"))


@pytest.fixture(scope="module")
def gen(asset_root: str) -> Generator:
    return Generator(asset_root=asset_root)


def test_output_dimensions(gen: Generator) -> None:
    image = gen.generate(PartialPosition())
    assert image.mode == "RGBA"
    assert image.size == (927, 572)


def test_empty_position_is_bare_board_and_empty_hands(gen: Generator) -> None:
    arr = gen.generate_array(PartialPosition())
    assert np.array_equal(arr, empty_canvas())


@pytest.mark.parametrize("color", list(Color))
@pytest.mark.parametrize("kind", list(PieceKind))
def test_single_piece_at_center(gen: Generator, color: Color, kind: PieceKind) -> None:
    piece = Piece(color, kind)
    position = PartialPosition(board=pmap({CENTER: piece}))
    arr = gen.generate_array(position)

    offset = to_canvas(piece_offset(CENTER))
    expected = expected_overlay(BOARD_COLOR, gen.atlas.sprite(piece))
    assert np.array_equal(region(arr, offset, PIECE_SIZE), expected)
    assert tuple(region(arr, offset, PIECE_SIZE)[28, 26]) == piece_color(piece)

    # Nothing else on the canvas changed.
    rest = arr.copy()
    bare = empty_canvas()
    x, y = offset
    rest[y : y + PIECE_SIZE[1], x : x + PIECE_SIZE[0]] = 0
    bare[y : y + PIECE_SIZE[1], x : x + PIECE_SIZE[0]] = 0
    assert np.array_equal(rest, bare)


def test_startpos_golden(gen: Generator) -> None:
    position = PartialPosition.startpos()
    arr = gen.generate_array(position)
    assert arr.shape == (572, 927, 4)

    expected = empty_canvas()
    for square in Square.all():
        piece = position.piece_at(square)
        if piece is None:
            continue
        x, y = to_canvas(piece_offset(square))
        expected[y : y + PIECE_SIZE[1], x : x + PIECE_SIZE[0]] = expected_overlay(
            BOARD_COLOR, gen.atlas.sprite(piece)
        )
    assert np.array_equal(arr, expected)


def test_startpos_kings(gen: Generator) -> None:
    arr = gen.generate_array(PartialPosition.startpos())
    black_king = region(arr, to_canvas(piece_offset(Square(5, 9))), PIECE_SIZE)
    white_king = region(arr, to_canvas(piece_offset(Square(5, 1))), PIECE_SIZE)
    assert tuple(black_king[28, 26]) == piece_color(Piece(Color.BLACK, PieceKind.KING))
    assert tuple(white_king[28, 26]) == piece_color(Piece(Color.WHITE, PieceKind.KING))


def test_hand_panel_is_dense(gen: Generator) -> None:
    hand = {
        PieceKind.ROOK: 1,
        PieceKind.BISHOP: 0,
        PieceKind.GOLD: 0,
        PieceKind.SILVER: 1,
        PieceKind.PAWN: 1,
    }
    arr = gen.generate_array(with_hands(black=hand))
    origin = black_hand_origin(BOARD_SIZE)
    panel = region(arr, origin, HAND_PANEL_SIZE)

    for slot, kind in enumerate([PieceKind.ROOK, PieceKind.SILVER, PieceKind.PAWN]):
        x, y = hand_slot_offset(slot)
        sprite = gen.atlas.sprite(Piece(Color.BLACK, kind))
        expected = expected_overlay(HAND_BACKGROUND, sprite)
        assert np.array_equal(region(panel, (x, y), PIECE_SIZE), expected)

    # Slot 3 stays empty.
    x, y = hand_slot_offset(3)
    assert (region(panel, (x, y), PIECE_SIZE) == HAND_BACKGROUND).all()


def test_hand_uses_black_sprites_for_white(gen: Generator) -> None:
    panel = np.array(generate_hand({PieceKind.LANCE: 1}, gen.atlas, gen.font))
    x, y = hand_slot_offset(0)
    assert tuple(panel[y + 28, x + 26]) == piece_color(
        Piece(Color.BLACK, PieceKind.LANCE)
    )


def test_count_glyph_only_for_two_or_more(gen: Generator) -> None:
    x, y = count_anchor(hand_slot_offset(0))
    # Area right of the first sprite, above the second slot column.
    glyph_box = (slice(y, y + 28), slice(x, x + 28))

    single = np.array(generate_hand({PieceKind.PAWN: 1}, gen.atlas, gen.font))
    assert (single[glyph_box] == HAND_BACKGROUND).all()

    double = np.array(generate_hand({PieceKind.PAWN: 2}, gen.atlas, gen.font))
    assert (double[glyph_box] != HAND_BACKGROUND).any()

    # Sprite pixels are identical either way.
    sx, sy = hand_slot_offset(0)
    assert np.array_equal(
        region(single, (sx, sy), PIECE_SIZE), region(double, (sx, sy), PIECE_SIZE)
    )


def test_white_hand_is_black_layout_rotated(gen: Generator) -> None:
    hand = {PieceKind.ROOK: 2, PieceKind.GOLD: 1, PieceKind.KNIGHT: 4, PieceKind.PAWN: 11}
    arr = gen.generate_array(with_hands(black=hand, white=hand))
    black_panel = region(arr, black_hand_origin(BOARD_SIZE), HAND_PANEL_SIZE)
    white_panel = region(arr, (0, 0), HAND_PANEL_SIZE)
    assert np.array_equal(white_panel, np.rot90(black_panel, 2))
    assert not np.array_equal(white_panel, black_panel)


def test_hands_do_not_touch_the_board(gen: Generator) -> None:
    hand = {kind: 2 for kind in (PieceKind.ROOK, PieceKind.BISHOP, PieceKind.PAWN)}
    arr = gen.generate_array(with_hands(black=hand, white=hand))
    board = region(arr, board_origin(), BOARD_SIZE)
    assert (board == BOARD_COLOR).all()


def test_highlight_under_last_move_destination(asset_root: str) -> None:
    style = RenderStyle(highlight=HighlightSquare.LAST_MOVE_TO)
    gen = Generator(style, asset_root=asset_root)
    position = Position().play(NormalMove(Square(7, 7), Square(7, 6)))
    arr = gen.generate_array(position)

    hx, hy = to_canvas(highlight_offset(Square(7, 6)))
    corner = arr[hy, hx]
    assert tuple(corner) != BOARD_COLOR
    assert corner[0] > corner[1] and corner[3] == 255
    # The far corner of the highlight is outside the piece sprite too.
    far = arr[hy + HIGHLIGHT_SIZE[1] - 1, hx + HIGHLIGHT_SIZE[0] - 1]
    assert tuple(far) == tuple(corner)
    # The piece is painted over the highlight.
    px, py = to_canvas(piece_offset(Square(7, 6)))
    assert tuple(arr[py + 28, px + 26]) == piece_color(Piece(Color.BLACK, PieceKind.PAWN))
    # The source square is not highlighted.
    sx, sy = to_canvas(highlight_offset(Square(7, 7)))
    assert tuple(arr[sy, sx]) == BOARD_COLOR


def test_highlight_disabled_by_default(gen: Generator) -> None:
    position = Position().play(NormalMove(Square(7, 7), Square(7, 6)))
    arr = gen.generate_array(position)
    hx, hy = to_canvas(highlight_offset(Square(7, 6)))
    assert tuple(arr[hy, hx]) == BOARD_COLOR


def test_highlight_needs_an_occupied_destination(asset_root: str) -> None:
    gen = Generator(
        RenderStyle(highlight=HighlightSquare.LAST_MOVE_TO), asset_root=asset_root
    )
    position = PartialPosition(previous_move=NormalMove(Square(5, 6), CENTER))
    arr = gen.generate_array(position)
    assert np.array_equal(arr, empty_canvas())


def test_position_types_are_interchangeable(gen: Generator) -> None:
    record = Position.from_usi("startpos moves 7g7f 3c3d 8h2b+ 3a2b B*4e")
    snapshot = record.current
    assert np.array_equal(gen.generate_array(record), gen.generate_array(snapshot))


def test_generator_is_reusable(gen: Generator) -> None:
    board_before = np.array(gen.atlas.board)
    first = gen.generate_array(PartialPosition.startpos())
    gen.generate_array(with_hands(black={PieceKind.PAWN: 3}))
    second = gen.generate_array(PartialPosition.startpos())
    assert np.array_equal(first, second)
    assert np.array_equal(np.array(gen.atlas.board), board_before)


def test_generate_board_leaves_atlas_untouched(gen: Generator) -> None:
    board = generate_board(PartialPosition.startpos(), gen.atlas)
    assert board is not gen.atlas.board
    assert (np.array(gen.atlas.board) == BOARD_COLOR).all()


def test_mis_sized_sprite_is_skipped(tmp_path: Path) -> None:
    odd = Piece(Color.BLACK, PieceKind.SILVER)
    gen = Generator(asset_root=write_asset_tree(tmp_path, sprite_sizes={odd: (40, 44)}))
    position = PartialPosition(
        board=pmap({CENTER: odd, Square(1, 1): Piece(Color.WHITE, PieceKind.LANCE)})
    )
    arr = gen.generate_array(position)

    center = region(arr, to_canvas(piece_offset(CENTER)), PIECE_SIZE)
    assert (center == BOARD_COLOR).all()
    corner = region(arr, to_canvas(piece_offset(Square(1, 1))), PIECE_SIZE)
    assert tuple(corner[28, 26]) == piece_color(Piece(Color.WHITE, PieceKind.LANCE))


@pytest.mark.parametrize("board", list(BoardStyle))
@pytest.mark.parametrize("pieces", list(PiecesStyle))
def test_every_style_combination(
    asset_root: str, board: BoardStyle, pieces: PiecesStyle
) -> None:
    gen = Generator(RenderStyle(board, pieces), asset_root=asset_root)
    rook = Piece(Color.BLACK, PieceKind.ROOK)
    image = gen.generate(PartialPosition(board=pmap({CENTER: rook})))
    assert image.getpixel((board_origin()[0] + 1, 1)) == BOARD_COLORS[board]
    x, y = to_canvas(piece_offset(CENTER))
    assert image.getpixel((x + 26, y + 28)) == piece_color(rook, pieces)


def test_piece_families_render_differently(asset_root: str) -> None:
    position = PartialPosition.startpos()
    arrays = [
        Generator(RenderStyle(pieces=pieces), asset_root=asset_root).generate_array(
            position
        )
        for pieces in PiecesStyle
    ]
    assert not np.array_equal(arrays[0], arrays[1])


def test_pos2img_uses_env_asset_root(
    asset_root: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(ASSET_ROOT_ENV, asset_root)
    default_generator.cache_clear()
    try:
        image = pos2img(PartialPosition.startpos())
    finally:
        default_generator.cache_clear()
    assert image.size == (927, 572)
    assert image.getpixel((board_origin()[0] + 1, 1)) == BOARD_COLOR


def test_pos2img_uses_package_asset_root(
    asset_root: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(ASSET_ROOT_ENV, raising=False)
    monkeypatch.setattr(assets, "PACKAGE_ASSET_ROOT", asset_root)
    default_generator.cache_clear()
    try:
        arr = np.array(pos2img(PartialPosition()))
    finally:
        default_generator.cache_clear()
    assert np.array_equal(arr, empty_canvas())


def test_pos2img_without_bundled_assets(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(ASSET_ROOT_ENV, raising=False)
    monkeypatch.setattr(assets, "PACKAGE_ASSET_ROOT", str(tmp_path / "data"))
    default_generator.cache_clear()
    try:
        with pytest.raises(AssetLoadError, match="No bundled assets"):
            pos2img(PartialPosition.startpos())
    finally:
        default_generator.cache_clear()


def test_render_alias(gen: Generator) -> None:
    position = PartialPosition.startpos()
    assert np.array_equal(np.array(gen.render(position)), gen.generate_array(position))
