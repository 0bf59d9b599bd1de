#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

# pylint: disable=protected-access

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import msgspec
from msgspec import msgpack

from blobchannel.backend import StorageBackend
from blobchannel.channel.read_channel import BlobReadChannel
from blobchannel.channel.validation import validate_limit, validate_position
from blobchannel.const import DEFAULT_CHUNK_SIZE, UNBOUNDED_LIMIT
from blobchannel.errors import InvalidArgumentError
from blobchannel.options import BlobSourceOption, RpcOption
from blobchannel.retry_manager import RetryPolicy
from blobchannel.types import BlobId


@dataclass(frozen=True)
class CapturedState:
    """
    Resumption point of a `BlobReadChannel`.

    A plain, hashable value: it holds what is needed to rebuild the channel against any backend, but never
    the backend, the retry policy or buffered data.
    """

    blob: BlobId
    request_options: Tuple[BlobSourceOption, ...] = ()
    position: int = 0
    is_open: bool = True
    end_of_stream: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE
    limit: int = UNBOUNDED_LIMIT
    last_etag: Optional[str] = None


def capture(channel: BlobReadChannel) -> CapturedState:
    """
    Capture the resumption point of a channel without changing it.

    Buffered bytes are not part of the state. If the channel holds a buffer, the captured position is the
    offset of its first unread byte and end of stream is cleared, so the restored channel re-fetches the
    unread tail.

    Args:
        channel (BlobReadChannel): Channel to capture.

    Returns:
        CapturedState: The captured state.
    """
    position = channel._position
    end_of_stream = channel._end_of_stream
    if channel._buffer is not None:
        position += channel._buffer_pos
        end_of_stream = False
    return CapturedState(
        blob=channel.blob,
        request_options=channel.request_options,
        position=position,
        is_open=channel.is_open(),
        end_of_stream=end_of_stream,
        chunk_size=channel.chunk_size,
        limit=channel.get_limit(),
        last_etag=channel.last_etag,
    )


def restore(
    state: CapturedState,
    backend: StorageBackend,
    retry_policy: Optional[RetryPolicy] = None,
) -> BlobReadChannel:
    """
    Build a new channel from a captured state. No I/O is performed; the first read always fetches.

    Args:
        state (CapturedState): State returned by `capture`.
        backend (StorageBackend): Backend the new channel fetches from.
        retry_policy (RetryPolicy, optional): Policy wrapping each fetch of the new channel.

    Returns:
        BlobReadChannel: New channel positioned at the captured offset.

    Raises:
        InvalidArgumentError: If the state holds a negative position or limit.
    """
    validate_position(state.position)
    validate_limit(state.limit)
    channel = BlobReadChannel(backend, state.blob, state.request_options, retry_policy)
    channel._last_etag = state.last_etag
    channel._position = state.position
    channel._is_open = state.is_open
    channel._end_of_stream = state.end_of_stream
    channel.set_chunk_size(state.chunk_size)
    channel._limit = state.limit
    return channel


class _StatePayload(msgspec.Struct, frozen=True):
    bucket: str
    name: str
    generation: Optional[int]
    request_options: List[Tuple[str, Any]]
    position: int
    is_open: bool
    end_of_stream: bool
    chunk_size: int
    limit: int
    last_etag: Optional[str]


_encoder = msgpack.Encoder()
_decoder = msgpack.Decoder(_StatePayload)


def dumps(state: CapturedState) -> bytes:
    """
    Serialize a captured state to msgpack bytes.

    Args:
        state (CapturedState): State to serialize.

    Returns:
        bytes: Serialized state.
    """
    payload = _StatePayload(
        bucket=state.blob.bucket,
        name=state.blob.name,
        generation=state.blob.generation,
        request_options=[
            (option.rpc_option.value, option.value) for option in state.request_options
        ],
        position=state.position,
        is_open=state.is_open,
        end_of_stream=state.end_of_stream,
        chunk_size=state.chunk_size,
        limit=state.limit,
        last_etag=state.last_etag,
    )
    return _encoder.encode(payload)


def loads(data: bytes) -> CapturedState:
    """
    Deserialize a captured state produced by `dumps`.

    Args:
        data (bytes): Serialized state.

    Returns:
        CapturedState: The state.

    Raises:
        InvalidArgumentError: If `data` is not a valid serialized state.
    """
    try:
        payload = _decoder.decode(data)
        request_options = tuple(
            BlobSourceOption(RpcOption(rpc_option), value)
            for rpc_option, value in payload.request_options
        )
    except (msgspec.DecodeError, ValueError) as err:
        raise InvalidArgumentError(f"Invalid captured state: {err}") from err
    validate_position(payload.position)
    validate_limit(payload.limit)
    return CapturedState(
        blob=BlobId(payload.bucket, payload.name, payload.generation),
        request_options=request_options,
        position=payload.position,
        is_open=payload.is_open,
        end_of_stream=payload.end_of_stream,
        chunk_size=payload.chunk_size,
        limit=payload.limit,
        last_etag=payload.last_etag,
    )
