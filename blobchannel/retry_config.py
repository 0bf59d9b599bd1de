"""
Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
"""

import logging
from dataclasses import dataclass

from urllib3.util.retry import Retry
from urllib3.exceptions import TimeoutError as Urllib3TimeoutError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    before_sleep_log,
    wait_random_exponential,
    stop_after_attempt,
)
from requests.exceptions import (
    ConnectTimeout,
    ReadTimeout,
    ChunkedEncodingError,
    ConnectionError as RequestsConnectionError,
)

from blobchannel.const import RETRYABLE_STATUS_CODES
from blobchannel.errors import RetryableTransportError

# Default Retry Exceptions
NETWORK_RETRY_EXCEPTIONS = (
    ConnectTimeout,
    ReadTimeout,
    ChunkedEncodingError,
    RequestsConnectionError,
    RetryableTransportError,
    Urllib3TimeoutError,
)


@dataclass
class RetryConfig:
    """
    Configuration class for managing both HTTP and network retries.

    Two layers of retries are applied to every fetch:

    1. **HTTP Retry (urllib3.Retry)** - Handles HTTP errors based on status codes (e.g., 429, 500, 502, 503, 504)
       inside a single physical request, at the connection adapter level.
    2. **Network Retry (tenacity)** - Re-issues the whole ranged fetch after connection failures, timeouts
       and retryable transport errors. One channel read is one logical operation, however many attempts
       tenacity makes for it.

    **Attributes:**
        http_retry (urllib3.Retry): Defines retry behavior for transient HTTP errors.
        network_retry (tenacity.Retrying): Configured `tenacity.Retrying` instance deciding, per failed attempt,
            whether and when to retry a fetch.
    """

    http_retry: Retry
    network_retry: Retrying

    @staticmethod
    def default() -> "RetryConfig":
        """
        Returns the default retry configuration.
        """
        return RetryConfig(
            http_retry=Retry(
                total=3,
                backoff_factor=1.0,  # 1s, 2s, 4s
                status_forcelist=list(RETRYABLE_STATUS_CODES),
                connect=0,
                read=0,
                # Let the response handler see the final status instead of a MaxRetryError
                raise_on_status=False,
            ),
            network_retry=Retrying(
                wait=wait_random_exponential(multiplier=1, min=1, max=32),
                stop=stop_after_attempt(6),
                retry=retry_if_exception_type(NETWORK_RETRY_EXCEPTIONS),
                before_sleep=before_sleep_log(logging.getLogger(), logging.WARNING),
                reraise=True,
            ),
        )
