#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

import os
from typing import Dict, Optional, Protocol, Sequence, Tuple, Union
from urllib.parse import quote

import requests
import urllib3

from blobchannel.const import (
    ALT_MEDIA,
    BLOBCHANNEL_ENDPOINT,
    BLOBCHANNEL_TOKEN,
    DEFAULT_ENDPOINT,
    HEADER_AUTHORIZATION,
    HEADER_ETAG,
    HEADER_GENERATION,
    HEADER_RANGE,
    HEADER_USER_AGENT,
    QPARAM_ALT,
    QPARAM_GENERATION,
    STATUS_OK,
    STATUS_RANGE_NOT_SATISFIABLE,
    URL_PATH_BUCKETS,
    URL_PATH_OBJECTS,
    URL_PATH_STORAGE,
    USER_AGENT_BASE,
)
from blobchannel.errors import InvalidArgumentError, RetryableTransportError
from blobchannel.options import (
    BlobSourceOption,
    RpcOption,
    to_headers,
    to_query_params,
)
from blobchannel.response_handler import ResponseHandler
from blobchannel.session_manager import SessionManager
from blobchannel.types import StorageObject
from blobchannel.utils import get_logger
from blobchannel.version import __version__ as sdk_version

logger = get_logger(__name__)

# Failures of a physical request, including those surfacing while the body is read
_NETWORK_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    requests.exceptions.ChunkedEncodingError,
    urllib3.exceptions.HTTPError,
)

# (etag, data) as returned by one ranged fetch
FetchResult = Tuple[Optional[str], bytes]


# pylint: disable=too-few-public-methods
class StorageBackend(Protocol):
    """
    Performs a single ranged fetch against the storage service.
    """

    def fetch_range(
        self,
        descriptor: StorageObject,
        request_options: Sequence[BlobSourceOption],
        offset: int,
        length: int,
    ) -> FetchResult:
        """
        Fetch up to `length` bytes of the object starting at `offset`.

        Returns:
            FetchResult: The object's current etag and the bytes read. Fewer bytes than requested
                (possibly none) means the end of the object was reached.

        Raises:
            TransportError: If the attempt failed.
        """


class HttpStorageBackend:
    """
    `StorageBackend` reading objects through the JSON API media download endpoint.

    Args:
        endpoint (str, optional): Root URL of the storage service. Defaults to the `BLOBCHANNEL_ENDPOINT`
            environment variable, then the public endpoint.
        session_manager (SessionManager, optional): Source of `requests` sessions. Defaults to a new
            SessionManager using the default HTTP retry.
        timeout (Union[float, Tuple[float, float], None], optional): Request timeout in seconds; a single float
            for both connect/read timeouts, a tuple for separate connect/read timeouts, or None to disable.
        token (str, optional): OAuth2 bearer token. Defaults to the `BLOBCHANNEL_TOKEN` environment variable.
        response_handler (ResponseHandler, optional): Handler mapping failed responses to transport errors.
    """

    # pylint: disable=too-many-arguments,too-many-positional-arguments
    def __init__(
        self,
        endpoint: Optional[str] = None,
        session_manager: Optional[SessionManager] = None,
        timeout: Optional[Union[float, Tuple[float, float]]] = None,
        token: Optional[str] = None,
        response_handler: Optional[ResponseHandler] = None,
    ):
        endpoint = endpoint or os.getenv(BLOBCHANNEL_ENDPOINT) or DEFAULT_ENDPOINT
        self._base_url = f"{endpoint.rstrip('/')}/{URL_PATH_STORAGE}"
        self._session_manager = session_manager or SessionManager()
        self._timeout = timeout
        self._token = token or os.getenv(BLOBCHANNEL_TOKEN)
        self._response_handler = response_handler or ResponseHandler()

    @property
    def base_url(self) -> str:
        """Return the base URL."""
        return self._base_url

    @property
    def timeout(self):
        """Return the timeout for requests."""
        return self._timeout

    @property
    def session_manager(self) -> SessionManager:
        """Return the SessionManager used to create sessions for this backend."""
        return self._session_manager

    def object_url(self, descriptor: StorageObject) -> str:
        """Return the media URL for the given object."""
        bucket = quote(descriptor.bucket, safe="")
        name = quote(descriptor.name, safe="")
        return f"{self._base_url}/{URL_PATH_BUCKETS}/{bucket}/{URL_PATH_OBJECTS}/{name}"

    def _generate_headers(
        self, request_options: Sequence[BlobSourceOption], offset: int, length: int
    ) -> Dict[str, str]:
        headers = to_headers(request_options)
        headers[HEADER_USER_AGENT] = f"{USER_AGENT_BASE}/{sdk_version}"
        headers[HEADER_RANGE] = f"bytes={offset}-{offset + length - 1}"
        if self._token:
            headers[HEADER_AUTHORIZATION] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _generate_params(
        descriptor: StorageObject, request_options: Sequence[BlobSourceOption]
    ) -> Dict[str, str]:
        params = {QPARAM_ALT: ALT_MEDIA}
        if descriptor.generation is not None:
            params[QPARAM_GENERATION] = str(descriptor.generation)
        params.update(to_query_params(request_options))
        return params

    def fetch_range(
        self,
        descriptor: StorageObject,
        request_options: Sequence[BlobSourceOption],
        offset: int,
        length: int,
    ) -> FetchResult:
        """
        Fetch up to `length` bytes of the object starting at `offset` with a single ranged GET.

        Args:
            descriptor (StorageObject): Object to read.
            request_options (Sequence[BlobSourceOption]): Resolved request options.
            offset (int): First byte to read.
            length (int): Maximum number of bytes to read.

        Returns:
            FetchResult: The etag of the object and the bytes read. A range starting past the end of the
                object yields `(None, b"")`.

        Raises:
            InvalidArgumentError: If offset is negative or length is not positive.
            RetryableTransportError: On connection failures, timeouts and retryable responses.
            TransportError: On any other failed response.
        """
        if offset < 0:
            raise InvalidArgumentError(f"Offset must be >= 0, got: {offset}")
        if length <= 0:
            raise InvalidArgumentError(f"Length must be > 0, got: {length}")

        url = self.object_url(descriptor)
        raw = any(
            option.rpc_option is RpcOption.RETURN_RAW_INPUT_STREAM and option.value
            for option in request_options
        )
        logger.debug("GET %s bytes=%d-%d", url, offset, offset + length - 1)
        try:
            resp = self._session_manager.session.get(
                url,
                params=self._generate_params(descriptor, request_options),
                headers=self._generate_headers(request_options, offset, length),
                timeout=self._timeout,
                stream=raw,
            )
            if resp.status_code == STATUS_RANGE_NOT_SATISFIABLE:
                return None, b""
            self._response_handler.handle_response(resp)
            data = resp.raw.read(decode_content=False) if raw else resp.content
        except _NETWORK_ERRORS as err:
            raise RetryableTransportError(0, str(err), url) from err

        if resp.status_code == STATUS_OK and offset:
            # Range was ignored and the whole object came back
            data = data[offset:]
        etag = resp.headers.get(HEADER_ETAG) or resp.headers.get(HEADER_GENERATION)
        return etag, bytes(data[:length])
