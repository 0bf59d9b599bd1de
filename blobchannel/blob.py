#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from pathlib import Path
from typing import BinaryIO, Optional, Union

from blobchannel.backend import StorageBackend
from blobchannel.channel.channel_file import ReadChannelFile
from blobchannel.channel.read_channel import BlobReadChannel
from blobchannel.codec import ApiaryConversions
from blobchannel.const import END_OF_STREAM
from blobchannel.options import BlobSourceOption, resolve_options
from blobchannel.retry_manager import RetryPolicy
from blobchannel.types import BlobId, StorageObject
from blobchannel.utils import get_logger, natural_size

logger = get_logger(__name__)


class Blob:
    """
    A remote object, read through `BlobReadChannel`s.

    Example of reading the content of an object through a reader:

        with blob.reader() as reader:
            buf = bytearray(64 * 1024)
            while (n := reader.readinto(buf)) != END_OF_STREAM:
                process(buf[:n])

    Args:
        backend (StorageBackend): Backend used by every reader of this blob.
        blob_id (BlobId): Identity of the object.
        retry_policy (RetryPolicy, optional): Policy wrapping each fetch. Defaults to `RetryManager()`.
        metageneration (int, optional): Known metageneration of the object, used to resolve
            metageneration conditions given without a value.
    """

    def __init__(
        self,
        backend: StorageBackend,
        blob_id: BlobId,
        retry_policy: Optional[RetryPolicy] = None,
        metageneration: Optional[int] = None,
    ):
        self._backend = backend
        self._blob_id = blob_id
        self._retry_policy = retry_policy
        self._metageneration = metageneration

    @staticmethod
    def from_storage_object(
        backend: StorageBackend,
        obj: StorageObject,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "Blob":
        """
        Create a Blob from its wire representation.

        Args:
            backend (StorageBackend): Backend used by every reader of this blob.
            obj (StorageObject): Object metadata, e.g. from a listing or a metadata request.
            retry_policy (RetryPolicy, optional): Policy wrapping each fetch.

        Returns:
            Blob: The blob.
        """
        blob_id = ApiaryConversions.blob_id().decode(obj)
        return Blob(backend, blob_id, retry_policy, obj.metageneration)

    @property
    def blob_id(self) -> BlobId:
        """Identity of the object."""
        return self._blob_id

    @property
    def metageneration(self) -> Optional[int]:
        """Known metageneration of the object, if any."""
        return self._metageneration

    def reader(self, *options: BlobSourceOption) -> BlobReadChannel:
        """
        Return a channel for reading this blob's content.

        Generation and metageneration conditions given without a value are bound to this blob's
        generation and metageneration.

        Args:
            *options (BlobSourceOption): Request options for every fetch of the channel.

        Returns:
            BlobReadChannel: An open channel at position 0.

        Raises:
            InvalidArgumentError: If a condition cannot be resolved.
        """
        resolved = resolve_options(
            options, self._blob_id.generation, self._metageneration
        )
        return BlobReadChannel(
            self._backend, self._blob_id, resolved, self._retry_policy
        )

    def as_file(self, *options: BlobSourceOption) -> ReadChannelFile:
        """
        Return a read-only, seekable file object over a new reader.

        Args:
            *options (BlobSourceOption): Request options for every fetch.

        Returns:
            ReadChannelFile: File object; closing it closes the reader.
        """
        return ReadChannelFile(self.reader(*options))

    def get_content(self, *options: BlobSourceOption) -> bytes:
        """
        Read the whole content of this blob into memory.

        One or more fetches are issued depending on the size of the object.

        Args:
            *options (BlobSourceOption): Request options for every fetch.

        Returns:
            bytes: Object content.
        """
        with self.reader(*options) as reader:
            return reader.read()

    def download_to(
        self, destination: Union[str, Path, BinaryIO], *options: BlobSourceOption
    ) -> int:
        """
        Download this blob to a local path or a writable binary file object.

        Args:
            destination (Union[str, Path, BinaryIO]): Path of the file to create (truncated if it exists),
                or an open binary file object.
            *options (BlobSourceOption): Request options for every fetch.

        Returns:
            int: Number of bytes written.
        """
        if hasattr(destination, "write"):
            written = self._copy_to(destination, options)
        else:
            with open(destination, "wb") as file:
                written = self._copy_to(file, options)
        logger.info(
            "Downloaded %s (%s) to %s",
            self._blob_id,
            natural_size(written),
            getattr(destination, "name", destination),
        )
        return written

    def _copy_to(self, file: BinaryIO, options) -> int:
        written = 0
        with self.reader(*options) as reader:
            buf = memoryview(bytearray(reader.chunk_size))
            while True:
                count = reader.readinto(buf)
                if count == END_OF_STREAM:
                    break
                file.write(buf[:count])
                written += count
        return written

    def __repr__(self) -> str:
        return f"Blob({self._blob_id})"
