#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from typing import Optional


class BlobChannelError(Exception):
    """
    Base class for all errors raised by blobchannel
    """


class ClosedChannelError(BlobChannelError, ValueError):
    """
    Raised when an I/O operation is attempted on a closed channel
    """

    def __init__(self, message: str = "I/O operation on closed channel."):
        super().__init__(message)


class InvalidArgumentError(BlobChannelError, ValueError):
    """
    Raised when an argument passed to a channel operation is out of range
    """


class ExternalModificationError(BlobChannelError):
    """
    Raised when the object being read changed between two fetches of the same channel
    """

    def __init__(self, blob, expected_etag: Optional[str], actual_etag: Optional[str]):
        self.blob = blob
        self.expected_etag = expected_etag
        self.actual_etag = actual_etag
        super().__init__(
            f"Blob {blob} was updated while reading "
            f"(expected etag: {expected_etag}, got: {actual_etag})"
        )


class TransportError(BlobChannelError):
    """
    Raised when a single fetch attempt against the storage service fails
    """

    def __init__(self, status_code: int, message: str, req_url: str = ""):
        self.status_code = status_code
        self.message = message
        self.req_url = req_url
        super().__init__(f"STATUS:{status_code}, MESSAGE:{message}, REQ_URL:{req_url}")


class RetryableTransportError(TransportError):
    """
    Raised for transport failures that may resolve by retrying, e.g. timeouts or 5xx responses
    """


# pylint: disable=unused-variable
class ObjectNotFoundError(TransportError):
    """
    Raised when the requested object (or generation) does not exist
    """


# pylint: disable=unused-variable
class PreconditionFailedError(TransportError):
    """
    Raised when a generation or metageneration precondition was not met
    """


class TransportExhaustedError(BlobChannelError):
    """
    Raised when the retry policy gave up on a fetch
    """

    def __init__(self, err: Optional[BaseException], attempts: int):
        self.original_error = err
        self.attempts = attempts
        super().__init__(
            f"Fetch failed after {attempts} attempt(s), giving up. Last error: {err!r}"
        )
