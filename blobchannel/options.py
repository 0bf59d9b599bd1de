#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

import base64
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from blobchannel.const import (
    ENCODING_GZIP,
    ENCRYPTION_ALGORITHM,
    HEADER_ACCEPT_ENCODING,
    HEADER_ENCRYPTION_ALGORITHM,
    HEADER_ENCRYPTION_KEY,
    HEADER_ENCRYPTION_KEY_SHA256,
    QPARAM_IF_GENERATION_MATCH,
    QPARAM_IF_GENERATION_NOT_MATCH,
    QPARAM_IF_METAGENERATION_MATCH,
    QPARAM_IF_METAGENERATION_NOT_MATCH,
    QPARAM_USER_PROJECT,
    UTF_ENCODING,
)
from blobchannel.errors import InvalidArgumentError


class RpcOption(Enum):
    """
    Request options understood by the storage backend
    """

    IF_GENERATION_MATCH = QPARAM_IF_GENERATION_MATCH
    IF_GENERATION_NOT_MATCH = QPARAM_IF_GENERATION_NOT_MATCH
    IF_METAGENERATION_MATCH = QPARAM_IF_METAGENERATION_MATCH
    IF_METAGENERATION_NOT_MATCH = QPARAM_IF_METAGENERATION_NOT_MATCH
    USER_PROJECT = QPARAM_USER_PROJECT
    CUSTOMER_SUPPLIED_KEY = "customerSuppliedKey"
    RETURN_RAW_INPUT_STREAM = "returnRawInputStream"


# Options whose value can be taken from the blob being read when left unset
_GENERATION_BOUND = (RpcOption.IF_GENERATION_MATCH, RpcOption.IF_GENERATION_NOT_MATCH)
_METAGENERATION_BOUND = (
    RpcOption.IF_METAGENERATION_MATCH,
    RpcOption.IF_METAGENERATION_NOT_MATCH,
)


@dataclass(frozen=True)
class BlobSourceOption:
    """
    A single request option applied to reads of an object.

    Options are plain hashable values so that they can be carried inside a captured channel state.

    Args:
        rpc_option (RpcOption): Which option this is.
        value (Any, optional): Option value. Generation and metageneration conditions may leave it
            unset, in which case it is resolved from the blob being read (see `resolve_options`).
    """

    rpc_option: RpcOption
    value: Any = None

    @staticmethod
    def generation_match(generation: Optional[int] = None) -> "BlobSourceOption":
        """Fail the request if the object's generation does not match."""
        return BlobSourceOption(RpcOption.IF_GENERATION_MATCH, generation)

    @staticmethod
    def generation_not_match(generation: Optional[int] = None) -> "BlobSourceOption":
        """Fail the request if the object's generation matches."""
        return BlobSourceOption(RpcOption.IF_GENERATION_NOT_MATCH, generation)

    @staticmethod
    def metageneration_match(metageneration: Optional[int] = None) -> "BlobSourceOption":
        """Fail the request if the object's metageneration does not match."""
        return BlobSourceOption(RpcOption.IF_METAGENERATION_MATCH, metageneration)

    @staticmethod
    def metageneration_not_match(
        metageneration: Optional[int] = None,
    ) -> "BlobSourceOption":
        """Fail the request if the object's metageneration matches."""
        return BlobSourceOption(RpcOption.IF_METAGENERATION_NOT_MATCH, metageneration)

    @staticmethod
    def decryption_key(key: Union[bytes, str]) -> "BlobSourceOption":
        """
        Read an object encrypted with a customer-supplied AES-256 key.

        Args:
            key (Union[bytes, str]): Raw 32-byte key, or its base64 encoding.
        """
        if isinstance(key, bytes):
            key = base64.b64encode(key).decode(UTF_ENCODING)
        return BlobSourceOption(RpcOption.CUSTOMER_SUPPLIED_KEY, key)

    @staticmethod
    def user_project(project: str) -> "BlobSourceOption":
        """Bill the request to the given project (requester-pays buckets)."""
        return BlobSourceOption(RpcOption.USER_PROJECT, project)

    @staticmethod
    def should_return_raw_input_stream(raw: bool) -> "BlobSourceOption":
        """If True, ask for the stored bytes without decompressive transcoding."""
        return BlobSourceOption(RpcOption.RETURN_RAW_INPUT_STREAM, raw)


def resolve_options(
    options: Iterable[BlobSourceOption],
    generation: Optional[int] = None,
    metageneration: Optional[int] = None,
) -> Tuple[BlobSourceOption, ...]:
    """
    Fill in unset (meta)generation conditions from the blob being read.

    Args:
        options (Iterable[BlobSourceOption]): Options as supplied by the caller.
        generation (int, optional): Generation of the blob being read.
        metageneration (int, optional): Metageneration of the blob being read.

    Returns:
        Tuple[BlobSourceOption, ...]: Options with every value set.

    Raises:
        InvalidArgumentError: If a condition has no value and the blob does not provide one.
    """
    resolved = []
    for option in options:
        if option.value is None:
            if option.rpc_option in _GENERATION_BOUND:
                option = BlobSourceOption(option.rpc_option, generation)
            elif option.rpc_option in _METAGENERATION_BOUND:
                option = BlobSourceOption(option.rpc_option, metageneration)
            if option.value is None:
                raise InvalidArgumentError(
                    f"Option '{option.rpc_option.name}' requires a value"
                )
        resolved.append(option)
    return tuple(resolved)


def to_query_params(options: Iterable[BlobSourceOption]) -> Dict[str, str]:
    """
    Translate request options into JSON API query parameters.

    Args:
        options (Iterable[BlobSourceOption]): Resolved request options.

    Returns:
        Dict[str, str]: Query parameters.
    """
    params = {}
    for option in options:
        if option.rpc_option in _GENERATION_BOUND + _METAGENERATION_BOUND:
            params[option.rpc_option.value] = str(option.value)
        elif option.rpc_option is RpcOption.USER_PROJECT:
            params[option.rpc_option.value] = option.value
    return params


def to_headers(options: Iterable[BlobSourceOption]) -> Dict[str, str]:
    """
    Translate request options into HTTP headers.

    Args:
        options (Iterable[BlobSourceOption]): Resolved request options.

    Returns:
        Dict[str, str]: Request headers.
    """
    headers = {}
    for option in options:
        if option.rpc_option is RpcOption.CUSTOMER_SUPPLIED_KEY:
            key = base64.b64decode(option.value)
            digest = hashlib.sha256(key).digest()
            headers[HEADER_ENCRYPTION_ALGORITHM] = ENCRYPTION_ALGORITHM
            headers[HEADER_ENCRYPTION_KEY] = option.value
            headers[HEADER_ENCRYPTION_KEY_SHA256] = base64.b64encode(digest).decode(
                UTF_ENCODING
            )
        elif option.rpc_option is RpcOption.RETURN_RAW_INPUT_STREAM and option.value:
            # Asking for gzip stops the service from decompressing on the fly
            headers[HEADER_ACCEPT_ENCODING] = ENCODING_GZIP
    return headers
