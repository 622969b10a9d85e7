#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Tests for depmap/color_utils.py"""

import io
import sys

import pytest

from depmap.color_utils import (
    Colors,
    colored,
    format_table_row,
    get_coupling_color,
    get_difficulty_color,
    print_error,
    print_success,
    print_warning,
    should_use_color,
)


class _Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


class TestColored:
    """Tests for colored()."""

    def test_wraps_text(self) -> None:
        result = colored("test", Colors.RED, Colors.BRIGHT)
        assert "test" in result
        assert result.endswith(Colors.RESET)

    def test_no_color_is_identity(self) -> None:
        assert colored("test", "") == "test"

    def test_disable(self, restore_colors: None) -> None:
        Colors.disable()
        assert Colors.RED == ""
        assert colored("test", Colors.RED) == "test"

    def test_palette(self, restore_colors: None) -> None:
        """Only the codes the console summary uses are defined, and disable() clears them all."""
        codes = sorted(attr for attr in dir(Colors) if not attr.startswith("_") and attr != "disable")
        assert codes == ["BRIGHT", "DIM", "GREEN", "NORMAL", "RED", "RESET", "WHITE", "YELLOW"]
        Colors.disable()
        assert all(getattr(Colors, attr) == "" for attr in codes)


class TestPrintFunctions:
    """Tests for the print_* helpers."""

    def test_print_success(self) -> None:
        output = io.StringIO()
        print_success("done", file=output, prefix=True)
        assert "Success: done" in output.getvalue()

    def test_print_error(self) -> None:
        output = io.StringIO()
        print_error("broken", file=output)
        assert "Error: broken" in output.getvalue()

    def test_print_warning_without_prefix(self) -> None:
        output = io.StringIO()
        print_warning("careful", file=output, prefix=False)
        assert "Warning" not in output.getvalue()
        assert "careful" in output.getvalue()


class TestColorSelection:
    """Tests for color selection helpers."""

    def test_should_use_color_opt_out(self) -> None:
        assert should_use_color(no_color=True) is False

    def test_should_use_color_respects_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "stdout", _Terminal())
        monkeypatch.setenv("NO_COLOR", "1")
        assert should_use_color() is False

    def test_difficulty_colors(self) -> None:
        assert get_difficulty_color("Easy") == (Colors.GREEN, Colors.NORMAL)
        assert get_difficulty_color("HARD") == (Colors.RED, Colors.BRIGHT)
        assert get_difficulty_color("unknown") == (Colors.WHITE, Colors.NORMAL)

    def test_coupling_colors(self) -> None:
        assert get_coupling_color("weak") == Colors.GREEN
        assert get_coupling_color("strong") == Colors.RED

    def test_format_table_row(self) -> None:
        assert format_table_row(["a", 1], [3, 2]) == "a   1 "
