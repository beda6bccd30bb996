from typing import Union

UNITS = (
    (1 << 60, "E"),
    (1 << 50, "P"),
    (1 << 40, "T"),
    (1 << 30, "G"),
    (1 << 20, "M"),
    (1 << 10, "K"),
)


def byte_size(byte_count: Union[int, float, None]) -> str:
    """Convert bytes to the compact form stored with traffic logs.

    Base 1024, one decimal with a trailing '.0' dropped: 4400 -> '4.3K',
    1024 -> '1K', 100 -> '100B', 0 -> '0B'.
    """
    if not byte_count or byte_count < 0:
        return "0B"
    value = float(byte_count)
    for size, label in UNITS:
        if value >= size:
            return _trim(value / size) + label
    return _trim(value) + "B"


def _trim(value: float) -> str:
    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text
