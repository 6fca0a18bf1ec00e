"""Position inputs accepted by the renderer.

The renderer only needs three read accessors, captured by the structural
:class:`PositionLike` protocol. Two implementations are provided:

* :class:`PartialPosition` is a board snapshot: a persistent map of occupied
  squares, per-color hands and an optional last move.
* :class:`Position` is a game record: an initial snapshot plus the moves played
  from it. Its last move is the last element of the history.

Both are frozen; :meth:`PartialPosition.make_move` and :meth:`Position.play`
return new values. Moves are applied without legality checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from pyrsistent import pmap
from pyrsistent.typing import PMap

from shogi_img.types import (
    Color,
    DropMove,
    Hand,
    LETTER_KINDS,
    HAND_KINDS,
    Move,
    Piece,
    PieceKind,
    Square,
    parse_usi_move,
)

STARTPOS_SFEN = "lnsgkgsnl/1r5b1/ppppppppp/9/9/9/PPPPPPPPP/1B5R1/LNSGKGSNL b - 1"

# SFEN lists hand pieces from the most valuable down.
_SFEN_HAND_ORDER: Tuple[PieceKind, ...] = tuple(reversed(HAND_KINDS))


@runtime_checkable
class PositionLike(Protocol):
    """Read-only view the renderer consumes."""

    def piece_at(self, square: Square) -> Optional[Piece]: ...

    def hand_of(self, color: Color) -> Hand: ...

    def last_move(self) -> Optional[Move]: ...


def _empty_hands() -> PMap[Color, PMap[PieceKind, int]]:
    return pmap({Color.BLACK: pmap(), Color.WHITE: pmap()})


@dataclass(frozen=True)
class PartialPosition:
    """Board snapshot.

    Attributes:
        board: Occupied squares only.
        hands: Captured piece counts per color.
        side_to_move: Color to play next.
        ply: 1-based ply number, as written in SFEN.
        previous_move: Move that produced this snapshot, if known.
    """

    board: PMap[Square, Piece] = field(default_factory=pmap)
    hands: PMap[Color, PMap[PieceKind, int]] = field(default_factory=_empty_hands)
    side_to_move: Color = Color.BLACK
    ply: int = 1
    previous_move: Optional[Move] = None

    @classmethod
    def startpos(cls) -> PartialPosition:
        return cls.from_sfen(STARTPOS_SFEN)

    @classmethod
    def from_sfen(cls, sfen: str) -> PartialPosition:
        """Parse ``<board> <side> <hands> [<ply>]``."""
        parts = sfen.split()
        if len(parts) not in (3, 4):
            raise ValueError(f"Invalid SFEN: {sfen!r}")
        board = _parse_sfen_board(parts[0])
        if parts[1] not in ("b", "w"):
            raise ValueError(f"Invalid side to move in SFEN: {parts[1]!r}")
        side = Color.BLACK if parts[1] == "b" else Color.WHITE
        hands = _parse_sfen_hands(parts[2])
        try:
            ply = int(parts[3]) if len(parts) == 4 else 1
        except ValueError:
            raise ValueError(f"Invalid ply in SFEN: {parts[3]!r}") from None
        return cls(board=board, hands=hands, side_to_move=side, ply=ply)

    def to_sfen(self) -> str:
        rows: List[str] = []
        for rank in range(1, 10):
            row = ""
            empties = 0
            for file in range(9, 0, -1):
                piece = self.board.get(Square(file, rank))
                if piece is None:
                    empties += 1
                    continue
                if empties:
                    row += str(empties)
                    empties = 0
                row += piece.sfen()
            if empties:
                row += str(empties)
            rows.append(row)

        hand_text = ""
        for color in (Color.BLACK, Color.WHITE):
            hand = self.hand_of(color)
            for kind in _SFEN_HAND_ORDER:
                count = hand.get(kind, 0)
                if count <= 0:
                    continue
                letter = Piece(color, kind).sfen()
                hand_text += letter if count == 1 else f"{count}{letter}"

        side = "b" if self.side_to_move is Color.BLACK else "w"
        return f"{'/'.join(rows)} {side} {hand_text or '-'} {self.ply}"

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.board.get(square)

    def hand_of(self, color: Color) -> Hand:
        return self.hands.get(color, pmap())

    def last_move(self) -> Optional[Move]:
        return self.previous_move

    def make_move(self, move: Move) -> PartialPosition:
        """Apply ``move`` and return the resulting snapshot.

        Captured pieces go to the mover's hand in their unpromoted form.
        """
        board = self.board
        hands = self.hands
        if isinstance(move, DropMove):
            mover = self.side_to_move
            hand = self.hand_of(mover)
            remaining = hand.get(move.kind, 0) - 1
            if remaining < 0:
                raise ValueError(f"No {move.kind} in hand for {mover}")
            hands = hands.set(mover, hand.set(move.kind, remaining))
            board = board.set(move.to, Piece(mover, move.kind))
        else:
            piece = board.get(move.from_square)
            if piece is None:
                raise ValueError(f"No piece at {move.from_square.usi()}")
            mover = piece.color
            captured = board.get(move.to)
            if captured is not None:
                hand = hands.get(mover, pmap())
                kind = captured.kind.unpromote()
                hands = hands.set(mover, hand.set(kind, hand.get(kind, 0) + 1))
            kind = piece.kind
            if move.promote:
                kind = kind.promote() or kind
            board = board.remove(move.from_square).set(move.to, Piece(mover, kind))
        return replace(
            self,
            board=board,
            hands=hands,
            side_to_move=mover.flip(),
            ply=self.ply + 1,
            previous_move=move,
        )


@dataclass(frozen=True)
class Position:
    """Game record: initial snapshot and the moves played from it."""

    initial: PartialPosition = field(default_factory=PartialPosition.startpos)
    moves: Tuple[Move, ...] = ()

    @classmethod
    def from_usi(cls, text: str) -> Position:
        """Parse a USI ``position`` body.

        Accepts ``startpos [moves ...]`` and ``sfen <sfen> [moves ...]``, with
        or without the leading ``position`` keyword.
        """
        tokens = text.split()
        if tokens and tokens[0] == "position":
            tokens = tokens[1:]
        if not tokens:
            raise ValueError("Empty USI position")
        if "moves" in tokens:
            split = tokens.index("moves")
            head, move_tokens = tokens[:split], tokens[split + 1 :]
        else:
            head, move_tokens = tokens, []

        if head == ["startpos"]:
            initial = PartialPosition.startpos()
        elif head and head[0] == "sfen":
            initial = PartialPosition.from_sfen(" ".join(head[1:]))
        else:
            raise ValueError(f"Invalid USI position: {text!r}")
        moves = tuple(parse_usi_move(token) for token in move_tokens)
        return cls(initial=initial, moves=moves)

    @cached_property
    def current(self) -> PartialPosition:
        snapshot = self.initial
        for move in self.moves:
            snapshot = snapshot.make_move(move)
        return snapshot

    def replay(self) -> PartialPosition:
        """Apply every move in the record; raises ValueError at the first bad one."""
        return self.current

    @property
    def side_to_move(self) -> Color:
        return self.current.side_to_move

    def play(self, move: Move) -> Position:
        return replace(self, moves=self.moves + (move,))

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.current.piece_at(square)

    def hand_of(self, color: Color) -> Hand:
        return self.current.hand_of(color)

    def last_move(self) -> Optional[Move]:
        if self.moves:
            return self.moves[-1]
        return self.initial.last_move()


def _parse_sfen_board(text: str) -> PMap[Square, Piece]:
    rows = text.split("/")
    if len(rows) != 9:
        raise ValueError(f"SFEN board must have 9 ranks: {text!r}")
    board = {}
    for rank, row in enumerate(rows, start=1):
        file = 9
        promoted = False
        for ch in row:
            if ch.isdigit():
                file -= int(ch)
                continue
            if ch == "+":
                promoted = True
                continue
            if file < 1:
                raise ValueError(f"SFEN rank {rank} is too long: {row!r}")
            board[Square(file, rank)] = Piece.from_sfen(f"+{ch}" if promoted else ch)
            promoted = False
            file -= 1
        if file != 0:
            raise ValueError(f"SFEN rank {rank} does not cover 9 files: {row!r}")
    return pmap(board)


def _parse_sfen_hands(text: str) -> PMap[Color, PMap[PieceKind, int]]:
    hands = _empty_hands()
    if text == "-":
        return hands
    count = ""
    for ch in text:
        if ch.isdigit():
            count += ch
            continue
        kind = LETTER_KINDS.get(ch.upper())
        if kind is None or kind not in HAND_KINDS:
            raise ValueError(f"Invalid SFEN hand piece: {ch!r}")
        color = Color.BLACK if ch.isupper() else Color.WHITE
        hand = hands[color]
        hands = hands.set(color, hand.set(kind, hand.get(kind, 0) + int(count or 1)))
        count = ""
    if count:
        raise ValueError(f"Dangling count in SFEN hands: {text!r}")
    return hands

