#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from itertools import product
from typing import List, Optional, Sequence, Tuple

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_none

from blobchannel.backend import FetchResult
from blobchannel.const import UTF_ENCODING
from blobchannel.errors import RetryableTransportError
from blobchannel.options import BlobSourceOption
from blobchannel.retry_config import NETWORK_RETRY_EXCEPTIONS, RetryConfig
from blobchannel.retry_manager import RetryManager
from blobchannel.types import StorageObject
from tests.const import ETAG


class InMemoryBackend:
    """
    `StorageBackend` serving a single in-memory object and recording every fetch.

    Args:
        data (bytes): Object content.
        etag (str, optional): Etag returned with every non-empty fetch.
    """

    def __init__(self, data: bytes, etag: Optional[str] = ETAG):
        self.data = data
        self.etag = etag
        self.calls: List[Tuple[int, int]] = []
        self.options: List[Sequence[BlobSourceOption]] = []

    def set_content(self, data: bytes, etag: Optional[str]):
        """Replace the object, as a concurrent writer would."""
        self.data = data
        self.etag = etag

    # pylint: disable=unused-argument
    def fetch_range(
        self,
        descriptor: StorageObject,
        request_options: Sequence[BlobSourceOption],
        offset: int,
        length: int,
    ) -> FetchResult:
        self.calls.append((offset, length))
        self.options.append(request_options)
        if offset >= len(self.data):
            return None, b""
        return self.etag, self.data[offset : offset + length]


class FlakyBackend(InMemoryBackend):
    """
    `InMemoryBackend` whose first `failures` fetch attempts raise `RetryableTransportError`.
    """

    def __init__(self, data: bytes, failures: int, etag: Optional[str] = ETAG):
        super().__init__(data, etag)
        self.failures = failures
        self.attempts = 0

    def fetch_range(self, descriptor, request_options, offset, length) -> FetchResult:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise RetryableTransportError(503, "Service Unavailable")
        return super().fetch_range(descriptor, request_options, offset, length)


def no_wait_retry_config(attempts: int = 3) -> RetryConfig:
    """Default retry config, retrying network errors `attempts` times without sleeping."""
    config = RetryConfig.default()
    config.network_retry = Retrying(
        wait=wait_none(),
        stop=stop_after_attempt(attempts),
        retry=retry_if_exception_type(NETWORK_RETRY_EXCEPTIONS),
        reraise=True,
    )
    return config


def no_wait_retry_manager(attempts: int = 3) -> RetryManager:
    return RetryManager(no_wait_retry_config(attempts))


def cases(*args):
    def decorator(func):
        def wrapper(self, *inner_args, **kwargs):
            for arg in args:
                with self.subTest(arg=arg):
                    func(self, arg, *inner_args, **kwargs)

        return wrapper

    return decorator


def case_matrix(*args_list):
    def decorator(func):
        def wrapper(self, *inner_args, **kwargs):
            for args in product(*args_list):
                with self.subTest(args=args):
                    func(self, *args, *inner_args, **kwargs)

        return wrapper

    return decorator


def create_error_response(req_url: str, status: int, msg: str) -> requests.Response:
    """
    Given test details, manually generate a requests.Response object

    Args:
        req_url (str): Original request url
        status (int): Response HTTP status code
        msg (str): Response text content

    Returns: requests.Response containing the given details
    """
    req = requests.Request()
    req.url = req_url
    response = requests.Response()
    response.status_code = status
    # pylint: disable=protected-access
    response._content = msg.encode(UTF_ENCODING)
    response.request = req
    return response
