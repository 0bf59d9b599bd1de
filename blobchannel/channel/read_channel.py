#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from typing import Iterable, Optional, Sequence, Tuple

from blobchannel.backend import FetchResult, StorageBackend
from blobchannel.channel.validation import (
    normalize_chunk_size,
    validate_limit,
    validate_open,
    validate_position,
)
from blobchannel.codec import ApiaryConversions
from blobchannel.const import DEFAULT_CHUNK_SIZE, END_OF_STREAM, UNBOUNDED_LIMIT
from blobchannel.errors import ExternalModificationError
from blobchannel.options import BlobSourceOption
from blobchannel.retry_manager import RetryManager, RetryPolicy
from blobchannel.types import BlobId
from blobchannel.utils import get_logger

logger = get_logger(__name__)


# pylint: disable=too-many-instance-attributes
class BlobReadChannel:
    """
    A seekable, boundable channel reading an object in chunks over a retried ranged fetch.

    Each `readinto()` either serves bytes left over from the previous fetch or issues exactly one logical
    fetch of at least `chunk_size` bytes (never crossing `limit`) through the retry policy. Bytes returned
    by the fetch are kept in an internal buffer until the caller has consumed them.

    The etag returned by the first fetch is remembered; if a later non-empty fetch returns a different
    etag the object changed underneath the reader, and `ExternalModificationError` is raised. The error is
    not retried and is raised again, without any fetch, until the caller seeks.

    A channel is not thread-safe. Use `capture()` to hand a read over to another thread or process.

    Args:
        backend (StorageBackend): Backend performing the ranged fetches.
        blob (BlobId): Object to read.
        request_options (Iterable[BlobSourceOption], optional): Resolved request options sent with every fetch.
        retry_policy (RetryPolicy, optional): Policy wrapping each fetch. Defaults to a `RetryManager` using
            `RetryConfig.default()`.
    """

    def __init__(
        self,
        backend: StorageBackend,
        blob: BlobId,
        request_options: Iterable[BlobSourceOption] = (),
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self._backend = backend
        self._blob = blob
        self._request_options = tuple(request_options)
        self._retry_policy = retry_policy or RetryManager()
        self._descriptor = ApiaryConversions.blob_id().encode(blob)
        self._last_etag: Optional[str] = None
        self._position = 0
        self._is_open = True
        self._end_of_stream = False
        self._chunk_size = DEFAULT_CHUNK_SIZE
        self._buffer: Optional[bytes] = None
        self._buffer_pos = 0
        self._limit = UNBOUNDED_LIMIT
        # Set once a fetch saw a different etag, cleared by seek
        self._modification: Optional[ExternalModificationError] = None

    @property
    def blob(self) -> BlobId:
        """Object this channel reads."""
        return self._blob

    @property
    def request_options(self) -> Tuple[BlobSourceOption, ...]:
        """Request options sent with every fetch."""
        return self._request_options

    @property
    def backend(self) -> StorageBackend:
        """Backend this channel fetches from."""
        return self._backend

    @property
    def retry_policy(self) -> RetryPolicy:
        """Policy wrapping each fetch."""
        return self._retry_policy

    @property
    def chunk_size(self) -> int:
        """Minimum number of bytes requested by each fetch."""
        return self._chunk_size

    @property
    def last_etag(self) -> Optional[str]:
        """Etag returned by the most recent fetch, if any."""
        return self._last_etag

    def is_open(self) -> bool:
        """Return whether the channel is open."""
        return self._is_open

    def tell(self) -> int:
        """
        Return the offset of the next byte `readinto()` will deliver.

        Raises:
            ClosedChannelError: If the channel is closed.
        """
        validate_open(self._is_open)
        return self._position + self._buffer_pos

    def set_chunk_size(self, chunk_size: int) -> None:
        """
        Set the minimum number of bytes fetched per request.

        Args:
            chunk_size (int): New chunk size; zero or negative restores `DEFAULT_CHUNK_SIZE`.
        """
        self._chunk_size = normalize_chunk_size(chunk_size)

    def limit(self, limit: int) -> "BlobReadChannel":
        """
        Bound reads to offsets strictly below `limit`. Reaching the limit is end of stream.

        Args:
            limit (int): Exclusive upper bound.

        Returns:
            BlobReadChannel: This channel.

        Raises:
            InvalidArgumentError: If `limit` is negative.
        """
        validate_limit(limit)
        self._limit = limit
        return self

    def get_limit(self) -> int:
        """Return the exclusive upper bound on readable offsets."""
        return self._limit

    def seek(self, position: int) -> None:
        """
        Move the read pointer, dropping any buffered data.

        Seeking past the end of the object is allowed; the next read returns `END_OF_STREAM`.

        Args:
            position (int): Absolute offset of the next byte to read.

        Raises:
            ClosedChannelError: If the channel is closed.
            InvalidArgumentError: If `position` is negative.
        """
        validate_open(self._is_open)
        validate_position(position)
        logger.debug("Seeking %s to %d", self._blob, position)
        self._position = position
        self._buffer = None
        self._buffer_pos = 0
        self._end_of_stream = False
        self._modification = None

    def close(self) -> None:
        """Close the channel and drop any buffered data. Closing twice is a no-op."""
        if self._is_open:
            self._buffer = None
            self._buffer_pos = 0
            self._is_open = False

    def _fetch(self, length: int) -> FetchResult:
        position = self._position
        logger.debug("Fetching %d bytes of %s at offset %d", length, self._blob, position)
        return self._retry_policy.with_retry(
            self._descriptor,
            lambda: self._backend.fetch_range(
                self._descriptor, self._request_options, position, length
            ),
        )

    def _check_etag(self, etag: Optional[str], data: bytes) -> None:
        if data and self._last_etag is not None and etag != self._last_etag:
            self._modification = ExternalModificationError(
                self._blob, self._last_etag, etag
            )
            logger.error("%s", self._modification)
            raise self._modification
        self._last_etag = etag

    def readinto(self, destination) -> int:
        """
        Read bytes into a writable buffer.

        At most `len(destination)` bytes are written; fewer may be, so callers wanting a given amount must
        loop. A zero-length destination returns 0 without fetching.

        Args:
            destination: Writable bytes-like object (bytearray, memoryview, ...).

        Returns:
            int: Number of bytes written, or `END_OF_STREAM` once the object end or the limit is reached.

        Raises:
            ClosedChannelError: If the channel is closed.
            ExternalModificationError: If the object changed since the previous fetch.
            TransportExhaustedError: If the retry policy gave up on the fetch.
            TransportError: If the fetch failed with an error the retry policy does not retry.
        """
        validate_open(self._is_open)
        view = memoryview(destination).cast("B")
        remaining = len(view)
        if self._buffer is not None and self._limit <= self._position + self._buffer_pos:
            # Limit was lowered below data already buffered
            self._position += self._buffer_pos
            self._buffer = None
            self._buffer_pos = 0
            self._end_of_stream = True
        if self._buffer is None:
            if self._end_of_stream:
                return END_OF_STREAM
            if self._modification is not None:
                raise self._modification
            if self._limit <= self._position:
                self._end_of_stream = True
                return END_OF_STREAM
            if remaining == 0:
                return 0
            to_read = min(self._limit - self._position, max(remaining, self._chunk_size))
            etag, data = self._fetch(to_read)
            data = bytes(data[:to_read])
            self._check_etag(etag, data)
            if len(data) < to_read:
                self._end_of_stream = True
                if not data:
                    return END_OF_STREAM
            self._buffer = data

        to_write = min(
            len(self._buffer) - self._buffer_pos,
            remaining,
            self._limit - (self._position + self._buffer_pos),
        )
        view[:to_write] = self._buffer[self._buffer_pos : self._buffer_pos + to_write]
        self._buffer_pos += to_write
        if self._buffer_pos >= len(self._buffer):
            self._position += len(self._buffer)
            self._buffer = None
            self._buffer_pos = 0
        return to_write

    def read(self, size: int = -1) -> bytes:
        """
        Read up to `size` bytes, looping over `readinto()` until satisfied or at end of stream.

        Args:
            size (int, optional): Number of bytes to read. If negative, read until end of stream.

        Returns:
            bytes: The data read; empty at end of stream.
        """
        validate_open(self._is_open)
        if size == 0:
            return b""
        if size < 0:
            return self._read_all()

        buf = bytearray(size)
        view = memoryview(buf)
        filled = 0
        while filled < size:
            written = self.readinto(view[filled:])
            if written == END_OF_STREAM:
                break
            filled += written
        return bytes(buf[:filled])

    def _read_all(self) -> bytes:
        result = []
        buf = bytearray(self._chunk_size)
        while True:
            written = self.readinto(buf)
            if written == END_OF_STREAM:
                break
            result.append(bytes(buf[:written]))
        return b"".join(result)

    def capture(self):
        """
        Capture the resumption point of this channel.

        Returns:
            CapturedState: See `blobchannel.channel.state.capture`.
        """
        # pylint: disable=import-outside-toplevel,cyclic-import
        from blobchannel.channel.state import capture

        return capture(self)

    def __enter__(self) -> "BlobReadChannel":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"BlobReadChannel(blob={self._blob}, position={self._position}, "
            f"is_open={self._is_open}, end_of_stream={self._end_of_stream}, "
            f"limit={self._limit})"
        )


def open_channel(
    backend: StorageBackend,
    blob: BlobId,
    request_options: Sequence[BlobSourceOption] = (),
    retry_policy: Optional[RetryPolicy] = None,
) -> BlobReadChannel:
    """
    Open a channel reading `blob` from its first byte.

    Args:
        backend (StorageBackend): Backend performing the ranged fetches.
        blob (BlobId): Object to read.
        request_options (Sequence[BlobSourceOption], optional): Resolved request options.
        retry_policy (RetryPolicy, optional): Policy wrapping each fetch.

    Returns:
        BlobReadChannel: An open channel at position 0.
    """
    return BlobReadChannel(backend, blob, request_options, retry_policy)
