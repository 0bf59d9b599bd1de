#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from blobchannel.const import DEFAULT_CHUNK_SIZE
from blobchannel.errors import ClosedChannelError, InvalidArgumentError


def validate_open(is_open: bool) -> None:
    """
    Raise if a channel is closed.

    Raises:
        ClosedChannelError: If `is_open` is False.
    """
    if not is_open:
        raise ClosedChannelError()


def _validate_non_negative(value: int, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{what} must be an integer, got: {value!r}")
    if value < 0:
        raise InvalidArgumentError(f"{what} must be >= 0, got: {value}")


def validate_position(position: int) -> None:
    """
    Validate a seek target. Positions past the end of the object are allowed.

    Raises:
        InvalidArgumentError: If `position` is not a non-negative integer.
    """
    _validate_non_negative(position, "Position")


def validate_limit(limit: int) -> None:
    """
    Validate an exclusive upper bound on readable offsets.

    Raises:
        InvalidArgumentError: If `limit` is not a non-negative integer.
    """
    _validate_non_negative(limit, "Limit")


def normalize_chunk_size(chunk_size: int) -> int:
    """Return `chunk_size`, or the default chunk size if it is not positive."""
    return DEFAULT_CHUNK_SIZE if chunk_size <= 0 else chunk_size
