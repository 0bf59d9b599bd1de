"""
Import client-accessible components here to provide consistent imports via `from blobchannel import *`

Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
"""

from blobchannel.version import __version__

# Core components
from blobchannel.blob import Blob
from blobchannel.channel import (
    BlobReadChannel,
    CapturedState,
    ReadChannelFile,
    capture,
    dumps,
    loads,
    open_channel,
    restore,
)

# Backends and retries
from blobchannel.backend import HttpStorageBackend, StorageBackend
from blobchannel.retry_config import RetryConfig
from blobchannel.retry_manager import RetryManager, RetryPolicy
from blobchannel.session_manager import SessionManager

# Config objects, types and dataclasses
from blobchannel.const import DEFAULT_CHUNK_SIZE, END_OF_STREAM
from blobchannel.options import BlobSourceOption, RpcOption
from blobchannel.types import BlobId, StorageObject

# Errors
from blobchannel.errors import (
    BlobChannelError,
    ClosedChannelError,
    ExternalModificationError,
    InvalidArgumentError,
    ObjectNotFoundError,
    PreconditionFailedError,
    RetryableTransportError,
    TransportError,
    TransportExhaustedError,
)
