"""Core value types for positions.

Colors, piece kinds, squares, pieces and moves are small immutable values.
The ordering of :class:`PieceKind` members is part of the asset contract: the
sprite table is indexed by ``PieceKind.array_index`` and the atlas remapping
in :mod:`shogi_img.assets` is written against it.
"""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Iterator, Mapping, Optional, Tuple, Union


class Color(StrEnum):
    """Side of a piece. ``BLACK`` (sente) moves first and sits at the bottom."""

    BLACK = auto()
    WHITE = auto()

    @property
    def array_index(self) -> int:
        return 0 if self is Color.BLACK else 1

    def flip(self) -> "Color":
        return Color.WHITE if self is Color.BLACK else Color.BLACK


class PieceKind(StrEnum):
    """Piece kinds, unpromoted first, then the promoted forms."""

    PAWN = auto()
    LANCE = auto()
    KNIGHT = auto()
    SILVER = auto()
    BISHOP = auto()
    ROOK = auto()
    GOLD = auto()
    KING = auto()
    PRO_PAWN = auto()
    PRO_LANCE = auto()
    PRO_KNIGHT = auto()
    PRO_SILVER = auto()
    PRO_BISHOP = auto()
    PRO_ROOK = auto()

    @property
    def array_index(self) -> int:
        return _KIND_ORDER.index(self)

    @property
    def is_promoted(self) -> bool:
        return self in _UNPROMOTE

    def promote(self) -> Optional["PieceKind"]:
        """Promoted form, or ``None`` for kinds that cannot promote."""
        return _PROMOTE.get(self)

    def unpromote(self) -> "PieceKind":
        """Base form; unpromoted kinds map to themselves."""
        return _UNPROMOTE.get(self, self)


_KIND_ORDER: Tuple[PieceKind, ...] = tuple(PieceKind)

_PROMOTE: Mapping[PieceKind, PieceKind] = {
    PieceKind.PAWN: PieceKind.PRO_PAWN,
    PieceKind.LANCE: PieceKind.PRO_LANCE,
    PieceKind.KNIGHT: PieceKind.PRO_KNIGHT,
    PieceKind.SILVER: PieceKind.PRO_SILVER,
    PieceKind.BISHOP: PieceKind.PRO_BISHOP,
    PieceKind.ROOK: PieceKind.PRO_ROOK,
}
_UNPROMOTE: Mapping[PieceKind, PieceKind] = {v: k for k, v in _PROMOTE.items()}

# Kinds that can be held in hand.
HAND_KINDS: Tuple[PieceKind, ...] = (
    PieceKind.PAWN,
    PieceKind.LANCE,
    PieceKind.KNIGHT,
    PieceKind.SILVER,
    PieceKind.GOLD,
    PieceKind.BISHOP,
    PieceKind.ROOK,
)

# SFEN / USI letters of the unpromoted kinds (upper case is Black).
KIND_LETTERS: Mapping[PieceKind, str] = {
    PieceKind.PAWN: "P",
    PieceKind.LANCE: "L",
    PieceKind.KNIGHT: "N",
    PieceKind.SILVER: "S",
    PieceKind.GOLD: "G",
    PieceKind.BISHOP: "B",
    PieceKind.ROOK: "R",
    PieceKind.KING: "K",
}
LETTER_KINDS: Mapping[str, PieceKind] = {v: k for k, v in KIND_LETTERS.items()}

RANK_LETTERS = "abcdefghi"


@dataclass(frozen=True)
class Square:
    """Board cell.

    Attributes:
        file: Column 1..9, counted from Black's right (file 9 is drawn leftmost).
        rank: Row 1..9, counted from the top (White's side).
    """

    file: int
    rank: int

    @staticmethod
    def all() -> Iterator["Square"]:
        """All 81 squares, file-major: 1a, 1b, ..., 9i."""
        for file in range(1, 10):
            for rank in range(1, 10):
                yield Square(file, rank)

    @staticmethod
    def from_usi(text: str) -> "Square":
        if len(text) != 2 or text[0] not in "123456789" or text[1] not in RANK_LETTERS:
            raise ValueError(f"Invalid USI square: {text!r}")
        return Square(int(text[0]), RANK_LETTERS.index(text[1]) + 1)

    def usi(self) -> str:
        return f"{self.file}{RANK_LETTERS[self.rank - 1]}"


@dataclass(frozen=True)
class Piece:
    """A colored piece kind."""

    color: Color
    kind: PieceKind

    @staticmethod
    def from_sfen(text: str) -> "Piece":
        """Parse ``"P"``, ``"+p"`` style SFEN tokens."""
        promoted = text.startswith("+")
        letter = text[1:] if promoted else text
        if len(letter) != 1 or letter.upper() not in LETTER_KINDS:
            raise ValueError(f"Invalid SFEN piece: {text!r}")
        kind = LETTER_KINDS[letter.upper()]
        if promoted:
            promoted_kind = kind.promote()
            if promoted_kind is None:
                raise ValueError(f"Piece cannot promote: {text!r}")
            kind = promoted_kind
        color = Color.BLACK if letter.isupper() else Color.WHITE
        return Piece(color, kind)

    def sfen(self) -> str:
        letter = KIND_LETTERS[self.kind.unpromote()]
        if self.color is Color.WHITE:
            letter = letter.lower()
        return f"+{letter}" if self.kind.is_promoted else letter


@dataclass(frozen=True)
class NormalMove:
    """Board move, optionally promoting on arrival."""

    from_square: Square
    to: Square
    promote: bool = False

    def usi(self) -> str:
        return f"{self.from_square.usi()}{self.to.usi()}{'+' if self.promote else ''}"


@dataclass(frozen=True)
class DropMove:
    """Placement of a piece from the mover's hand."""

    kind: PieceKind
    to: Square

    def usi(self) -> str:
        return f"{KIND_LETTERS[self.kind]}*{self.to.usi()}"


Move = Union[NormalMove, DropMove]

# Per-kind captured piece counts. Missing kinds count as zero.
Hand = Mapping[PieceKind, int]


def parse_usi_move(text: str) -> Move:
    """Parse a USI move such as ``7g7f``, ``8h2b+`` or ``P*5e``."""
    if len(text) == 4 and text[1] == "*":
        kind = LETTER_KINDS.get(text[0])
        if kind is None or kind not in HAND_KINDS:
            raise ValueError(f"Invalid USI drop: {text!r}")
        return DropMove(kind, Square.from_usi(text[2:]))
    if len(text) in (4, 5):
        if len(text) == 5 and text[4] != "+":
            raise ValueError(f"Invalid USI move: {text!r}")
        return NormalMove(
            Square.from_usi(text[0:2]), Square.from_usi(text[2:4]), len(text) == 5
        )
    raise ValueError(f"Invalid USI move: {text!r}")
