"""Tests for small-piece row consolidation."""
import pytest

from cladding_layout.consolidate import consolidate_row
from cladding_layout.sequencer import ValueSequencer


def _widths(pieces):
    return [piece.width for piece in pieces]


def _covered(pieces, joint):
    return sum(_widths(pieces)) + joint * (len(pieces) - 1)


class TestConsolidateRow:
    """Rows always end flush without undersized remainders."""

    def test_short_tail_becomes_own_piece_when_large_enough(self):
        pieces = consolidate_row(1000.0, ValueSequencer([800.0]), 3.0, 150.0)
        assert _widths(pieces) == pytest.approx([800.0, 197.0])
        assert [p.trimmed for p in pieces] == [False, True]

    def test_small_tail_is_absorbed(self):
        pieces = consolidate_row(1000.0, ValueSequencer([900.0]), 3.0, 150.0)
        assert _widths(pieces) == pytest.approx([1000.0])
        assert pieces[0].trimmed is False

    def test_absorbs_into_interior_piece(self):
        pieces = consolidate_row(2100.0, ValueSequencer([1000.0]), 0.0, 150.0)
        assert _widths(pieces) == pytest.approx([1000.0, 1100.0])

    def test_last_piece_cut_to_fit(self):
        pieces = consolidate_row(2500.0, ValueSequencer([1000.0]), 0.0, 150.0)
        assert _widths(pieces) == pytest.approx([1000.0, 1000.0, 500.0])

    def test_lead_offset_shortens_first_piece(self):
        pieces = consolidate_row(3000.0, ValueSequencer([1000.0]), 0.0, 150.0, lead_offset=500.0)
        assert _widths(pieces) == pytest.approx([500.0, 1000.0, 1000.0, 500.0])

    def test_lead_offset_ignored_when_too_short(self):
        pieces = consolidate_row(1000.0, ValueSequencer([200.0]), 0.0, 150.0, lead_offset=100.0)
        assert pieces[0].width == pytest.approx(200.0)

    def test_zero_width(self):
        assert consolidate_row(0.0, ValueSequencer([100.0]), 3.0, 150.0) == []

    def test_row_narrower_than_minimum(self):
        pieces = consolidate_row(90.0, ValueSequencer([800.0]), 3.0, 150.0)
        assert _widths(pieces) == pytest.approx([90.0])

    def test_piece_cap_absorbs_leftover(self):
        pieces = consolidate_row(10000.0, ValueSequencer([100.0]), 0.0, 0.0, max_pieces=5)
        assert len(pieces) == 5
        assert pieces[-1].width == pytest.approx(9600.0)
        assert _covered(pieces, 0.0) == pytest.approx(10000.0)

    def test_short_draws_are_merged(self):
        seq = ValueSequencer([100.0])
        pieces = consolidate_row(1000.0, seq, 0.0, 150.0)
        assert _widths(pieces) == pytest.approx([200.0] * 5)
        assert seq.index == 10

    def test_merged_draws_keep_their_joint(self):
        pieces = consolidate_row(1000.0, ValueSequencer([100.0, 900.0]), 3.0, 150.0)
        assert _widths(pieces) == pytest.approx([1000.0])
        pieces = consolidate_row(2000.0, ValueSequencer([100.0, 900.0]), 3.0, 150.0)
        assert _widths(pieces)[0] == pytest.approx(1003.0)
        assert pieces[0].trimmed is False

    def test_sequencer_state_carries_over(self):
        seq = ValueSequencer([800.0, 900.0, 1000.0])
        consolidate_row(1000.0, seq, 3.0, 150.0)
        assert seq.index == 2


@pytest.mark.parametrize("width", [150.0, 999.0, 1234.5, 3000.0, 7777.7])
@pytest.mark.parametrize("min_size", [0.0, 150.0, 400.0])
@pytest.mark.parametrize("joint", [0.0, 3.0, 10.0])
@pytest.mark.parametrize(
    "lengths",
    [
        [800.0, 900.0, 1000.0, 1100.0, 1200.0],
        [100.0],
        [120.0, 60.0, 500.0],
    ],
)
def test_width_is_exactly_consumed(width, min_size, joint, lengths):
    """Pieces plus joints add up to the row width and none is undersized."""
    seq = ValueSequencer(lengths)
    pieces = consolidate_row(width, seq, joint, min_size, lead_offset=451.5)
    assert _covered(pieces, joint) == pytest.approx(width, abs=1e-6)
    if len(pieces) > 1:
        assert min(_widths(pieces)) >= min_size - 1e-9
