"""Row filling that never leaves an undersized trailing piece.

Instead of clipping the last element of a row against the boundary, the
row is measured first: whenever placing the next piece would leave less
than the minimum piece size, that piece is stretched to the row end.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from cladding_layout.sequencer import ValueSequencer

_EPS = 1e-9


@dataclass(frozen=True)
class RowPiece:
    width: float
    nominal: float  # length drawn from the sequencer

    @property
    def trimmed(self) -> bool:
        return self.width < self.nominal - 1e-3


def consolidate_row(
    row_width: float,
    sequencer: ValueSequencer,
    joint: float,
    min_size: float,
    lead_offset: float = 0.0,
    max_pieces: int = 150,
) -> List[RowPiece]:
    """Split *row_width* into pieces separated by *joint*.

    Invariant: ``sum(widths) + joint * (len - 1) == row_width``. Draws
    shorter than *min_size* are merged with the following draws into one
    piece. A piece is stretched to the row end when the space left after it
    (plus its joint) would be below *min_size* or negative, so every piece
    is at least *min_size* unless it spans the whole row.

    Args:
        row_width: Width to fill.
        sequencer: Source of nominal lengths.
        joint: Gap between consecutive pieces.
        min_size: Smallest acceptable remainder.
        lead_offset: Shortening of the first piece (running-bond stagger).
            Ignored when it would leave the first piece below *min_size*.
        max_pieces: Work cap; the last piece absorbs any leftover width.
    """
    pieces: List[RowPiece] = []
    if row_width <= _EPS:
        return pieces

    floor = max(min_size, _EPS)
    remaining = row_width
    while remaining > _EPS and len(pieces) < max_pieces:
        nominal = sequencer.next()
        merged = 1
        while nominal < floor and merged < max_pieces:
            nominal += joint + sequencer.next()
            merged += 1
        length = nominal
        if not pieces and lead_offset > 0.0 and nominal - lead_offset >= floor:
            length = nominal - lead_offset

        space_after = remaining - length - joint
        if length >= remaining or space_after < floor:
            pieces.append(RowPiece(width=remaining, nominal=nominal))
            remaining = 0.0
            break

        pieces.append(RowPiece(width=length, nominal=nominal))
        remaining = space_after

    if remaining > _EPS:
        if pieces:
            last = pieces.pop()
            pieces.append(RowPiece(width=last.width + joint + remaining, nominal=last.nominal))
        else:
            pieces.append(RowPiece(width=row_width, nominal=row_width))
    return pieces
