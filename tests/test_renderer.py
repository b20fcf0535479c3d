"""Tests for the pure frame layout: labels, address column, bar widths, ranking and cells."""

import pytest

from src.heatbar.models import THEME, PaintOp, RenderConfig
from src.heatbar.registry import HeatRegistry, HeatSample
from src.heatbar.renderer import (
    compute_bar_width, compute_tier_widths, format_address, format_heat,
    heat_label, layout_frame, rank_samples, rasterize, render_frame,
)

# Terminal width giving a 100-column bar: 16 + 3 + 100 + 10
WIDE = 129


class TestFormatHeat:
    """Test cases for heat label formatting."""

    @pytest.mark.unit
    @pytest.mark.parametrize("heat,expected", [
        (0, "0"),
        (999, "999"),
        (1000, "1.0k"),
        (1500, "1.5k"),
        (200000, "200.0k"),
        (2500000, "2.5M"),
    ])
    def test_units(self, heat, expected):
        """Test integer, k and M formatting below the display cap."""
        assert format_heat(heat, max_heat_display=10 ** 9) == expected

    @pytest.mark.unit
    def test_max_at_and_above_display_cap(self):
        """Test MAX at the display cap."""
        assert format_heat(1000000, max_heat_display=1000000) == "MAX"
        assert format_heat(1500000, max_heat_display=1000000) == "MAX"
        assert format_heat(999999, max_heat_display=1000000) == "1000.0k"

    @pytest.mark.unit
    def test_negative_heat_normalized(self):
        """Test that a negative heat is shown as zero."""
        assert format_heat(-20) == "0"
        assert format_heat(float("nan")) == "0"

    @pytest.mark.unit
    def test_padded_label(self):
        """Test the label as drawn, with one space either side."""
        assert heat_label(1500) == " 1.5k "
        assert heat_label(1000000) == " MAX "
        assert heat_label(2500000, max_heat_display=10 ** 15) == " 2.5M "

    @pytest.mark.unit
    def test_overlong_label_falls_back_to_max(self):
        """Test that a label wider than the label column becomes MAX."""
        assert heat_label(10 ** 13, max_heat_display=10 ** 15) == " MAX "


class TestFormatAddress:
    """Test cases for the fixed-width address column."""

    @pytest.mark.unit
    def test_dotted_quad_segments_are_three_wide(self):
        """Test per-segment right padding."""
        assert format_address("192.168.1.10", 16) == "192.168.1  .10  "
        assert format_address("10.0.0.1", 16) == "10 .0  .0  .1   "

    @pytest.mark.unit
    def test_dotted_quad_is_constant_width(self):
        """Test that dots line up whatever the octet values."""
        for address in ("1.1.1.1", "255.255.255.255", "10.200.3.45", "0.0.0.0"):
            formatted = format_address(address, 16)
            assert len(formatted) == 16
            assert [i for i, ch in enumerate(formatted) if ch == "."] == [3, 7, 11]

    @pytest.mark.unit
    def test_long_segment_keeps_first_three_characters(self):
        """Test truncation of an oversized segment."""
        assert format_address("1234.5.6.7", 16) == "123.5  .6  .7   "

    @pytest.mark.unit
    def test_ipv6_padded_or_truncated_as_whole(self):
        """Test non-quad addresses."""
        assert format_address("fe80::1c2a:3bff:fe4d:5e6f", 16) == "fe80::1c2a:3bff:"
        assert format_address("::1", 16) == "::1" + " " * 13

    @pytest.mark.unit
    def test_non_printable_characters_replaced(self):
        """Test malformed addresses are normalized rather than rejected."""
        assert format_address("10.0.0.1\x1b", 16) == "10 .0  .0  .1?  "


class TestBarWidths:
    """Test cases for bar width computation."""

    @pytest.mark.unit
    def test_bar_width_from_terminal_width(self, render_config):
        """Test bar width = width - address column - separator - label column."""
        assert compute_bar_width(WIDE, render_config) == 100
        assert compute_bar_width(80, render_config) == 51

    @pytest.mark.unit
    def test_bar_width_minimum(self, render_config):
        """Test the ten column floor on narrow terminals."""
        assert compute_bar_width(20, render_config) == 10
        assert compute_bar_width(0, render_config) == 10

    @pytest.mark.unit
    @pytest.mark.parametrize("heat,expected", [
        (0, (0, 0)),
        (75000, (50, 0)),
        (150000, (100, 0)),
        (300000, (100, 10)),
        (1650000, (100, 100)),
        (5000000, (100, 100)),
    ])
    def test_tier_widths(self, heat, expected):
        """Test both tiers with barWidth=100 and max_bytes=150000."""
        assert compute_tier_widths(heat, 150000, 100) == expected

    @pytest.mark.unit
    def test_tier_widths_round_half_up(self):
        """Test that .5 rounds up."""
        assert compute_tier_widths(1, 4, 2) == (1, 0)

    @pytest.mark.unit
    def test_negative_heat_gives_empty_bars(self):
        """Test defensive clamping of negative heat."""
        assert compute_tier_widths(-100, 150000, 100) == (0, 0)

    @pytest.mark.unit
    @pytest.mark.parametrize("max_bytes", [0, -5, float("nan")])
    def test_invalid_scale_does_not_fail(self, max_bytes):
        """Test that a zero or invalid max_bytes still yields widths."""
        assert compute_tier_widths(0, max_bytes, 100) == (0, 0)
        assert compute_tier_widths(1, max_bytes, 100) == (100, 0)
        assert compute_tier_widths(500, max_bytes, 100) == (100, 100)

    @pytest.mark.unit
    def test_layout_with_zero_max_bytes(self):
        """Test that a directly built config with max_bytes=0 still renders."""
        config = RenderConfig(max_bytes=0)

        ops = layout_frame([HeatSample("10.0.0.1", 1000)], WIDE, 5, config, THEME)

        assert any(op.style == THEME.tier_two for op in ops)


class TestRanking:
    """Test cases for snapshot ranking."""

    @pytest.mark.unit
    def test_heat_descending_ties_by_address(self, sample_snapshot):
        """Test ordering rule."""
        ranked = rank_samples(sample_snapshot, 10)

        assert [s.address for s in ranked] == [
            "192.168.1.10", "10.0.0.1", "10.0.0.2", "fe80::1c2a:3bff:fe4d:5e6f", "8.8.8.8",
        ]

    @pytest.mark.unit
    def test_truncated_to_limit(self, sample_snapshot):
        """Test truncation to the rows that fit."""
        assert [s.address for s in rank_samples(sample_snapshot, 2)] == ["192.168.1.10", "10.0.0.1"]
        assert rank_samples(sample_snapshot, 0) == []

    @pytest.mark.unit
    def test_deterministic_across_input_order(self, sample_snapshot):
        """Test that input order never changes the ranking."""
        assert rank_samples(sample_snapshot, 10) == rank_samples(list(reversed(sample_snapshot)), 10)

    @pytest.mark.unit
    def test_consecutive_snapshots_rank_the_same(self, registry):
        """Test that nothing is dropped or duplicated between unchanged snapshots."""
        for i in range(20):
            registry.record_traffic(f"10.0.0.{i}", (i % 4) * 1000)

        first = rank_samples(registry.snapshot(), 50)
        second = rank_samples(registry.snapshot(), 50)

        assert first == second
        assert len({s.address for s in first}) == 20


class TestLayoutFrame:
    """Test cases for paint operation layout and rasterization."""

    @pytest.mark.unit
    def test_row_paint_operations(self, render_config):
        """Test every span of a single row, in paint order."""
        ops = layout_frame([HeatSample("10.0.0.1", 300000)], WIDE, 5, render_config)

        assert ops == [
            PaintOp(0, 0, "10 .0  .0  .1   ", THEME.address),
            PaintOp(0, 16, " | ", THEME.separator),
            PaintOp(0, 19, "█" * 100, THEME.tier_one),
            PaintOp(0, 19, "█" * 10, THEME.tier_two),
            PaintOp(0, 120, " 300.0k ", THEME.label),
        ]

    @pytest.mark.unit
    def test_tier_two_overwrites_leading_tier_one_cells(self, render_config):
        """Test overlap resolution in the grid."""
        grid = render_frame([HeatSample("10.0.0.1", 300000)], WIDE, 1, render_config)

        assert grid.cell(19, 0).style == THEME.tier_two
        assert grid.cell(28, 0).style == THEME.tier_two
        assert grid.cell(29, 0).style == THEME.tier_one
        assert grid.cell(118, 0).style == THEME.tier_one
        assert grid.cell(119, 0).style is None

    @pytest.mark.unit
    def test_empty_tier_two_is_not_emitted(self, render_config):
        """Test that zero-length spans produce no operation."""
        ops = layout_frame([HeatSample("10.0.0.1", 75000)], WIDE, 5, render_config)

        assert [op.style for op in ops] == [
            THEME.address, THEME.separator, THEME.tier_one, THEME.label,
        ]

    @pytest.mark.unit
    def test_rows_limited_to_height(self, render_config, sample_snapshot):
        """Test that no row at or past the terminal height is painted."""
        ops = layout_frame(sample_snapshot, WIDE, 2, render_config)

        assert {op.row for op in ops} == {0, 1}

    @pytest.mark.unit
    @pytest.mark.parametrize("width", [5, 10, 18, 30, 40, 80])
    def test_no_cell_past_terminal_width(self, render_config, sample_snapshot, width):
        """Test clipping at every width."""
        ops = layout_frame(sample_snapshot, width, 10, render_config)

        for op in ops:
            assert op.column < width
            assert op.column + len(op.text) <= width

        grid = rasterize(ops, width, 10)
        assert all(len(row) == width for row in grid.rows)

    @pytest.mark.unit
    def test_label_dropped_when_off_screen(self, render_config):
        """Test a terminal too narrow for the label column."""
        ops = layout_frame([HeatSample("10.0.0.1", 75000)], 30, 1, render_config)

        assert THEME.label not in [op.style for op in ops]
        assert ops[-1] == PaintOp(0, 19, "█" * 5, THEME.tier_one)

    @pytest.mark.unit
    def test_degenerate_sizes(self, render_config, sample_snapshot):
        """Test empty output for zero-sized terminals."""
        assert layout_frame(sample_snapshot, 0, 10, render_config) == []
        assert layout_frame(sample_snapshot, 80, 0, render_config) == []
        assert render_frame(sample_snapshot, 0, 0, render_config).rows == []

    @pytest.mark.unit
    def test_custom_column_width(self):
        """Test that layout follows the configured address column and separator."""
        config = RenderConfig(address_column_width=20, separator=": ")
        ops = layout_frame([HeatSample("::1", 10)], 80, 1, config)

        assert ops[0] == PaintOp(0, 0, "::1" + " " * 17, THEME.address)
        assert ops[1] == PaintOp(0, 20, ": ", THEME.separator)
        # 80 - 20 - 2 - 10 = 48 column bar, label at 22 + 48 + 1
        assert ops[-1].column == 71


class TestEndToEnd:
    """Registry, decay and render together."""

    @pytest.mark.integration
    def test_two_addresses_render_decay_and_converge(self, render_config):
        """Test ranking, one decay tick and convergence to zero."""
        registry = HeatRegistry(max_heat=1000000)
        registry.record_traffic("10.0.0.2", 50000)   # B
        registry.record_traffic("10.0.0.1", 200000)  # A

        grid = render_frame(registry.snapshot(), WIDE, 2, render_config)
        assert grid.row_text(0).startswith("10 .0  .0  .1")
        assert grid.row_text(1).startswith("10 .0  .0  .2")
        assert grid.row_text(0)[121:127] == "200.0k"
        assert grid.row_text(1)[121:126] == "50.0k"

        registry.decay_all(500)
        assert registry.heat_of("10.0.0.1") == 199500
        assert registry.heat_of("10.0.0.2") == 49500

        for _ in range(400):
            registry.decay_all(500)
        assert registry.heat_of("10.0.0.1") == 0
        assert registry.heat_of("10.0.0.2") == 0

        registry.decay_all(500)
        assert {s.heat for s in registry.snapshot()} == {0.0}

        grid = render_frame(registry.snapshot(), WIDE, 2, render_config)
        # Zero heat: no bar, label "0", ties ordered by address
        assert grid.row_text(0).startswith("10 .0  .0  .1")
        assert grid.cell(19, 0).style is None
        assert grid.row_text(0)[120:123] == " 0 "
