#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from io import RawIOBase, SEEK_CUR, SEEK_END, SEEK_SET, UnsupportedOperation

from overrides import override

from blobchannel.channel.read_channel import BlobReadChannel
from blobchannel.const import END_OF_STREAM


class ReadChannelFile(RawIOBase):
    """
    A read-only, seekable raw file object over a `BlobReadChannel`, for libraries expecting file handles.

    `read()`, `readall()` and line iteration come from `RawIOBase` on top of `readinto()`. The size of the
    object is not known up front, so seeking relative to the end is not supported.

    Args:
        channel (BlobReadChannel): Channel to read from. Closing the file closes the channel.
    """

    def __init__(self, channel: BlobReadChannel):
        super().__init__()
        self._channel = channel

    @property
    def channel(self) -> BlobReadChannel:
        """Channel this file reads from."""
        return self._channel

    @override
    def readable(self) -> bool:
        """Return whether the file is readable."""
        return self._channel.is_open()

    @override
    def seekable(self) -> bool:
        """Return whether the file supports seeking."""
        return self._channel.is_open()

    @override
    def readinto(self, buffer) -> int:
        """
        Read bytes into `buffer`.

        Returns:
            int: Number of bytes read; 0 at end of stream.

        Raises:
            ClosedChannelError: I/O operation on a closed channel.
        """
        written = self._channel.readinto(buffer)
        return 0 if written == END_OF_STREAM else written

    @override
    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        """
        Move the file position.

        Args:
            offset (int): Position offset.
            whence (int): SEEK_SET or SEEK_CUR.

        Returns:
            int: The new absolute position.

        Raises:
            UnsupportedOperation: If whence is SEEK_END.
            ValueError: If whence is unknown or the resulting position is negative.
        """
        if whence == SEEK_SET:
            position = offset
        elif whence == SEEK_CUR:
            position = self._channel.tell() + offset
        elif whence == SEEK_END:
            raise UnsupportedOperation("Seeking relative to the end of an object")
        else:
            raise ValueError(f"Invalid whence value: {whence}")
        self._channel.seek(position)
        return position

    @override
    def tell(self) -> int:
        """Return the current file position."""
        return self._channel.tell()

    @override
    def close(self) -> None:
        """Close the file and the underlying channel."""
        self._channel.close()
        super().close()
