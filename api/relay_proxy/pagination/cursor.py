"""Cursor encoding for forward-only page/offset pagination.

A cursor names the upstream page that has to be (re-)read to resume an
iteration and the absolute offset of the item it points at. On the wire it is
the base64 form of the ASCII text ``page=<int>;offset=<int>``.
"""

import base64
import binascii
import re

from pydantic import BaseModel, ConfigDict, Field

from ..errors.problem_details import InvalidArgumentError, InvalidCursorError


_PAGE_OFFSET_PATTERN = re.compile(r"page=([0-9]+);offset=([0-9]+)")
_ARRAY_PREFIX = "arrayconnection:"


class CursorPosition(BaseModel):
    """Decoded form of a page/offset cursor."""

    page: int = Field(ge=0, description="Upstream page to read to resume")
    offset: int = Field(ge=0, description="Absolute position of the item across the iteration")

    model_config = ConfigDict(frozen=True)

    def to_cursor(self) -> str:
        """Encode this position as an opaque cursor string."""
        return encode_cursor(self.page, self.offset)


def _to_base64(text: str) -> str:
    return base64.b64encode(text.encode("ascii")).decode("ascii")


def _from_base64(cursor: str) -> str:
    """Decode a base64 cursor into its ASCII payload.

    Raises:
        InvalidCursorError: If the cursor is empty, not canonical base64 or
            not ASCII
    """
    if not cursor or not cursor.strip():
        raise InvalidCursorError("Empty cursor provided")

    try:
        raw = base64.b64decode(cursor.encode("ascii"), validate=True)
        payload = raw.decode("ascii")
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidCursorError(f"Invalid cursor format: {e}", cursor=cursor)

    # Extra padding or stray low bits decode fine but were never issued
    if _to_base64(payload) != cursor:
        raise InvalidCursorError("Cursor is not canonically encoded", cursor=cursor)

    return payload


def encode_cursor(page: int, offset: int) -> str:
    """Encode a page/offset pair as a cursor.

    Args:
        page: Upstream page number, zero based
        offset: Absolute item offset across the iteration

    Returns:
        Base64 encoded cursor string

    Raises:
        InvalidArgumentError: If page or offset is negative
    """
    if page < 0 or offset < 0:
        raise InvalidArgumentError(
            f"Cursor page and offset must be non-negative, got page={page} offset={offset}"
        )
    return _to_base64(f"page={page};offset={offset}")


def decode_cursor(cursor: str) -> CursorPosition:
    """Decode a page/offset cursor.

    Args:
        cursor: Base64 encoded cursor string

    Returns:
        The decoded cursor position

    Raises:
        InvalidCursorError: If the cursor is invalid or malformed
    """
    payload = _from_base64(cursor)

    match = _PAGE_OFFSET_PATTERN.fullmatch(payload)
    if not match:
        raise InvalidCursorError(f"Invalid paged cursor provided: {payload!r}", cursor=cursor)

    return CursorPosition(page=int(match.group(1)), offset=int(match.group(2)))


ZERO_CURSOR = encode_cursor(0, 0)


def offset_to_cursor(index: int) -> str:
    """Encode a list index as a cursor for in-memory list connections."""
    if index < 0:
        raise InvalidArgumentError(f"List offset must be non-negative, got {index}")
    return _to_base64(f"{_ARRAY_PREFIX}{index}")


def cursor_to_offset(cursor: str) -> int:
    """Decode a list connection cursor back into a list index.

    Raises:
        InvalidCursorError: If the cursor is not a list connection cursor
    """
    payload = _from_base64(cursor)

    if not payload.startswith(_ARRAY_PREFIX):
        raise InvalidCursorError(f"Invalid list cursor provided: {payload!r}", cursor=cursor)

    index = payload[len(_ARRAY_PREFIX):]
    if not index.isdigit():
        raise InvalidCursorError(f"Invalid list cursor provided: {payload!r}", cursor=cursor)

    return int(index)
