# pure_disk/sizes.py
"""
Parsing of operator-supplied partition sizes.

Accepted tokens are an integer magnitude followed by M or G (binary
multiples). An empty token or a literal '0' means "use the remaining space"
where the caller allows it.
"""
import re
from typing import Optional

from pure_disk.models import FixedSize, REMAINING_SPACE, Size
from pure_disk.utils.exceptions import InvalidSizeFormat

SIZE_PATTERN = re.compile(r"^([0-9]+)([MG])$")
REMAINING_TOKENS = ("", "0")


def parse_size(token: Optional[str], allow_remaining: bool = False) -> Size:
    """
    Parses `token` into a FixedSize or, when `allow_remaining` is set, the
    REMAINING_SPACE sentinel.

    Raises:
        InvalidSizeFormat: for anything else.
    """
    token = (token or "").strip()

    if token in REMAINING_TOKENS:
        if allow_remaining:
            return REMAINING_SPACE
        raise InvalidSizeFormat(token, "A fixed size is required here (e.g. 512M, 8G).")

    match = SIZE_PATTERN.match(token)
    if not match:
        raise InvalidSizeFormat(token)

    magnitude, unit = match.groups()
    return FixedSize(magnitude=int(magnitude), unit=unit)


def parse_size_or_default(token: Optional[str], default: str, allow_remaining: bool = False) -> Size:
    """Like parse_size, but an empty answer selects `default` instead."""
    token = (token or "").strip()
    if not token:
        token = default
    return parse_size(token, allow_remaining=allow_remaining)
