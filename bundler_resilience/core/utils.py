# /bundler_resilience/core/utils.py
# Small value helpers shared by the fee resolver and the metric publisher.
from typing import Any, Callable, Dict, Iterable, Optional, TypeVar

T = TypeVar("T")


def to_str(value: int | str) -> str:
    """Decimal string for an int, a decimal string or a 0x-prefixed hex string."""
    if isinstance(value, str):
        value = int(value, 16) if value.lower().startswith("0x") else int(value)
    return str(int(value))


def map_of(
    keys: Iterable[str],
    mapper: Callable[[str], T],
    filter: Optional[Callable[[str], bool]] = None,
) -> Dict[str, T]:
    """
    Build a dict from keys.

    Args:
        keys: the keys of the returned dict.
        mapper: maps a key to its value.
        filter: if given, must return True for a key to be included.
    """
    return {key: mapper(key) for key in keys if filter is None or filter(key)}


def deep_hexlify(obj: Any) -> Any:
    """
    Recursively convert integers to minimal 0x-prefixed hex strings.

    Strings, booleans and None pass through unchanged; bytes become their hex
    encoding; mappings and sequences are walked. Hex strings keep values above
    2**53 exact for consumers whose JSON numbers are doubles.
    """
    if obj is None or isinstance(obj, (str, bool)):
        return obj
    if isinstance(obj, int):
        return hex(obj)
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if isinstance(obj, dict):
        return {key: deep_hexlify(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [deep_hexlify(member) for member in obj]
    return obj
