"""
Integer Codec

Decimal rendering and parsing for the Yak length field. The length field
has no fixed width on the wire, so every digit folded into a value goes
through accumulate_digit(), the single place where overflow is detected.
"""
from yak.exceptions import LengthOverflowError
from yak.models import LENGTH_MAX

_ZERO = ord("0")
_NINE = ord("9")


def is_digit(byte: int) -> bool:
    """Return True if ``byte`` is an ASCII decimal digit."""
    return _ZERO <= byte <= _NINE


def render_integer(value: int, size: int) -> bytes:
    """
    Render ``value`` as decimal ASCII.

    Args:
        value: Integer to render (may be negative)
        size: Room available for the text plus one terminator byte

    Returns:
        The digits, preceded by ``-`` for negative values, with no leading
        zeros except for ``b"0"`` itself.

    Raises:
        LengthOverflowError: If the rendered text does not fit in ``size``.
    """
    text = str(int(value)).encode("ascii")
    if len(text) >= size:
        raise LengthOverflowError(
            f"Decimal rendering of {value} does not fit in {size} bytes",
            details={"value": value, "size": size, "needed": len(text) + 1},
        )
    return text


def accumulate_digit(value: int, byte: int) -> int:
    """
    Fold one ASCII digit into ``value``.

    Raises:
        LengthOverflowError: If the new value wraps or leaves the
            representable length range.
    """
    previous = value
    value = value * 10 + (byte - _ZERO)
    if value < previous or value > LENGTH_MAX:
        raise LengthOverflowError(
            "Message length exceeds the representable range",
            details={"limit": LENGTH_MAX},
        )
    return value


def parse_integer(data: bytes) -> int:
    """
    Parse a run of ASCII digits.

    Raises:
        ValueError: If ``data`` is empty or holds a non-digit byte.
        LengthOverflowError: If the value does not fit the length range.
    """
    if not data:
        raise ValueError("no digits to parse")
    value = 0
    for byte in data:
        if not is_digit(byte):
            raise ValueError(f"non-digit byte 0x{byte:02x} in decimal field")
        value = accumulate_digit(value, byte)
    return value
