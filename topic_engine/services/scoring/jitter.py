"""Deterministic per-phrase jitter used to break score ties."""

_UINT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def string_hash(text: str) -> int:
    """Signed 32-bit polynomial hash (``h = h * 31 + code``)."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & _UINT32_MASK
    if value & _INT32_SIGN:
        value -= 1 << 32
    return value


def jitter(text: str, spread: int) -> int:
    """Stable offset in ``[-spread, spread]`` derived from ``text``."""
    if spread <= 0:
        return 0
    return abs(string_hash(text)) % (2 * spread + 1) - spread
