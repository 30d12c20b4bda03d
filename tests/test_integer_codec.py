"""
Tests for the decimal length codec.
"""
import pytest

from yak.exceptions import LengthOverflowError
from yak.models import LENGTH_MAX
from yak.transport.integer_codec import (
    accumulate_digit,
    is_digit,
    parse_integer,
    render_integer,
)


class TestRenderInteger:
    """Tests for render_integer()."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, b"0"), (7, b"7"), (10, b"10"), (4096, b"4096"), (-1, b"-1"), (-250, b"-250")],
    )
    def test_renders_decimal(self, value, expected):
        """Test that render_integer() produces decimal text."""
        assert render_integer(value, 32) == expected

    def test_no_leading_zeros(self):
        """Test that render_integer() never emits leading zeros."""
        assert not render_integer(100, 32).startswith(b"0")

    def test_exact_fit_leaves_room_for_terminator(self):
        """Test that a result needs one spare byte, like a C string."""
        assert render_integer(999, 4) == b"999"
        with pytest.raises(LengthOverflowError):
            render_integer(1000, 4)

    def test_negative_needs_room_for_sign(self):
        """Test that the minus sign counts toward the buffer size."""
        with pytest.raises(LengthOverflowError):
            render_integer(-10, 3)


class TestAccumulateDigit:
    """Tests for the overflow-checked digit accumulation."""

    def test_folds_digits(self):
        """Test that accumulate_digit() folds digits into a value."""
        value = accumulate_digit(0, ord("4"))
        value = accumulate_digit(value, ord("2"))
        assert value == 42

    def test_largest_value_is_accepted(self):
        """Test that LENGTH_MAX itself is accepted."""
        assert parse_integer(str(LENGTH_MAX).encode()) == LENGTH_MAX

    def test_one_past_largest_value_overflows(self):
        """Test that LENGTH_MAX + 1 raises LengthOverflowError."""
        with pytest.raises(LengthOverflowError):
            parse_integer(str(LENGTH_MAX + 1).encode())

    def test_repeated_digits_overflow_instead_of_wrapping(self):
        """Test that long digit runs overflow instead of wrapping."""
        with pytest.raises(LengthOverflowError) as exc_info:
            parse_integer(b"9" * 40)
        assert exc_info.value.details["limit"] == LENGTH_MAX


class TestParseInteger:
    """Tests for parse_integer() and is_digit()."""

    def test_leading_zeros_accepted(self):
        """Test that parse_integer() accepts leading zeros."""
        assert parse_integer(b"007") == 7

    def test_rejects_empty(self):
        """Test that parse_integer() rejects empty input."""
        with pytest.raises(ValueError):
            parse_integer(b"")

    def test_rejects_non_digit(self):
        """Test that parse_integer() rejects a non-digit byte."""
        with pytest.raises(ValueError, match="0x2d"):
            parse_integer(b"-1")

    def test_is_digit(self):
        """Test that is_digit() accepts only ASCII digits."""
        assert all(is_digit(b) for b in b"0123456789")
        assert not any(is_digit(b) for b in b"/:a \n")
