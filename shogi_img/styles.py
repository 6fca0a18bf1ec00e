"""Style selection.

A :class:`RenderStyle` fixes which board finish and piece family a generator
loads and whether the last-move highlight sprite exists. The registries map
each enum member to its path relative to the asset root.
"""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Dict, Union


class BoardStyle(StrEnum):
    """Board finish."""

    LIGHT = auto()  # light-colored wood
    WARM = auto()  # warm-colored wood
    RESIN = auto()  # synthetic resin


class PiecesStyle(StrEnum):
    """Piece sprite family."""

    HITOMOJI = auto()
    HITOMOJI_GOTHIC = auto()


class HighlightSquare(StrEnum):
    """Which square, if any, gets the translucent highlight."""

    NONE = auto()
    LAST_MOVE_TO = auto()


BOARD_ASSET_REGISTRY: Dict[BoardStyle, str] = {
    BoardStyle.LIGHT: "board/light.png",
    BoardStyle.WARM: "board/warm.png",
    BoardStyle.RESIN: "board/resin.png",
}

PIECES_ASSET_REGISTRY: Dict[PiecesStyle, str] = {
    PiecesStyle.HITOMOJI: "pieces/hitomoji",
    PiecesStyle.HITOMOJI_GOTHIC: "pieces/hitomoji_gothic",
}


@dataclass(frozen=True)
class RenderStyle:
    """Style combination fixed for a generator's lifetime.

    Attributes:
        board: Board background asset.
        pieces: Piece sprite family.
        highlight: Highlight mode.
    """

    board: BoardStyle = BoardStyle.LIGHT
    pieces: PiecesStyle = PiecesStyle.HITOMOJI
    highlight: HighlightSquare = HighlightSquare.NONE

    @classmethod
    def parse(
        cls,
        board: Union[BoardStyle, str] = BoardStyle.LIGHT,
        pieces: Union[PiecesStyle, str] = PiecesStyle.HITOMOJI,
        highlight: Union[HighlightSquare, str] = HighlightSquare.NONE,
    ) -> "RenderStyle":
        """Build a style from enum members or their lower-case names."""
        return cls(
            board=BoardStyle(board),
            pieces=PiecesStyle(pieces),
            highlight=HighlightSquare(highlight),
        )

    @property
    def board_path(self) -> str:
        return BOARD_ASSET_REGISTRY[self.board]

    @property
    def pieces_path(self) -> str:
        return PIECES_ASSET_REGISTRY[self.pieces]
