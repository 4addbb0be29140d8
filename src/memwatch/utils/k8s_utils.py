import logging
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

logger = logging.getLogger(__name__)

KIB = 1024
MIB = 1024**2
GIB = 1024**3

# Longest suffixes first so "Mi" is not read as "M" followed by garbage.
_BINARY_SUFFIXES = {
    "Ki": Decimal(1024),
    "Mi": Decimal(1024**2),
    "Gi": Decimal(1024**3),
    "Ti": Decimal(1024**4),
    "Pi": Decimal(1024**5),
    "Ei": Decimal(1024**6),
}
_DECIMAL_SUFFIXES = {
    "n": Decimal("0.000000001"),
    "u": Decimal("0.000001"),
    "m": Decimal("0.001"),
    "k": Decimal(1000),
    "M": Decimal(1000**2),
    "G": Decimal(1000**3),
    "T": Decimal(1000**4),
    "P": Decimal(1000**5),
    "E": Decimal(1000**6),
}


def parse_quantity(quantity: Union[str, int, float, Decimal]) -> Decimal:
    """
    Parse a Kubernetes quantity ("512Mi", "1G", "250m", "1e3") to a Decimal.

    Raises:
        ValueError: If the quantity cannot be parsed.
    """
    if isinstance(quantity, (int, float, Decimal)):
        return Decimal(quantity)

    text = str(quantity).strip()
    number, multiplier = text, Decimal(1)
    for suffix, factor in _BINARY_SUFFIXES.items():
        if text.endswith(suffix):
            number, multiplier = text[: -len(suffix)], factor
            break
    else:
        # Exponent notation ("1e3", "12E6") ends in a digit, never in a suffix letter.
        if text and text[-1] in _DECIMAL_SUFFIXES:
            number, multiplier = text[:-1], _DECIMAL_SUFFIXES[text[-1]]

    try:
        return Decimal(number) * multiplier
    except InvalidOperation as e:
        raise ValueError(f"Invalid Kubernetes quantity: '{quantity}'") from e


def parse_memory_bytes(memory: Optional[Union[str, int]]) -> Optional[int]:
    """
    Converts a K8s memory quantity to bytes.

    Returns None when the quantity is absent or cannot be parsed, so that an
    undeclared value is never confused with a declared zero.
    """
    if memory is None or memory == "":
        return None
    try:
        return int(parse_quantity(memory))
    except (ValueError, OverflowError):
        logger.warning("Ignoring unparseable memory quantity '%s'", memory)
        return None


def format_memory(value: Optional[int]) -> str:
    """Formats a byte count with binary scaling: B, KB, MB (one decimal), GB (two decimals)."""
    if value is None:
        return "N/A"

    if value >= GIB:
        return f"{value / GIB:.2f} GB"
    if value >= MIB:
        return f"{value / MIB:.1f} MB"
    if value >= KIB:
        return f"{value / KIB:.1f} KB"
    return f"{value} B"


def format_percent(percent: Optional[float]) -> str:
    if percent is None:
        return "N/A"
    return f"{percent:.1f}%"


def format_bytes_for_csv(value: Optional[int]) -> str:
    return "" if value is None else str(value)


def format_percent_for_csv(percent: Optional[float]) -> str:
    return "" if percent is None else f"{percent:.2f}"
