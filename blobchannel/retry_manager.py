#
# Copyright (c) 2023-2025, NVIDIA CORPORATION. All rights reserved.
#
from typing import Callable, Optional, Protocol, TypeVar

import tenacity

from blobchannel.errors import TransportExhaustedError
from blobchannel.retry_config import RetryConfig
from blobchannel.types import StorageObject
from blobchannel import utils

T = TypeVar("T")
logger = utils.get_logger(__name__)


# pylint: disable=too-few-public-methods
class RetryPolicy(Protocol):
    """
    Decides whether and when to retry the physical attempts of one logical operation.

    Implementations must either return the result of `func` or raise; once they give up on retryable
    failures they must raise `TransportExhaustedError`, never return partial data.
    """

    def with_retry(self, descriptor: StorageObject, func: Callable[[], T]) -> T:
        """Run `func`, retrying failed attempts as the policy sees fit."""


class RetryManager:
    """
    Default `RetryPolicy`, applying the tenacity `network_retry` of a `RetryConfig` to each fetch.

    Args:
        retry_config (Optional[RetryConfig]): Retry configuration. Defaults to `RetryConfig.default()`.
    """

    def __init__(self, retry_config: Optional[RetryConfig] = None):
        self._retry_config = retry_config or RetryConfig.default()

    @property
    def retry_config(self) -> RetryConfig:
        """Return the retry config provided to this manager"""
        return self._retry_config

    def _retrying_for(self, descriptor: StorageObject) -> tenacity.Retrying:
        """
        Copy the configured `Retrying` for a single operation on `descriptor`.

        The copy never re-raises on exhaustion, so that exhaustion can be told apart from an
        error the policy chose not to retry.
        """
        configured_before_sleep = self._retry_config.network_retry.before_sleep

        def before_sleep(retry_state: tenacity.RetryCallState):
            self._before_sleep(descriptor, retry_state)
            if configured_before_sleep:
                configured_before_sleep(retry_state)

        return self._retry_config.network_retry.copy(
            before_sleep=before_sleep,
            reraise=False,
            retry_error_callback=None,
        )

    @staticmethod
    def _before_sleep(descriptor: StorageObject, retry_state: tenacity.RetryCallState):
        """
        Hook called by tenacity before sleeping between attempts.

        Args:
            descriptor (StorageObject): Object the operation is reading.
            retry_state (tenacity.RetryCallState): Retry state from tenacity.
        """
        outcome = retry_state.outcome
        exc = outcome.exception() if outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Fetch of gs://%s/%s failed on attempt %d (%s), retrying in %.2fs",
            descriptor.bucket,
            descriptor.name,
            retry_state.attempt_number,
            type(exc).__name__ if exc else "no result",
            delay,
        )

    def with_retry(self, descriptor: StorageObject, func: Callable[[], T]) -> T:
        """
        Run `func` as one logical operation.

        Args:
            descriptor (StorageObject): Object the operation is reading, used for logging.
            func (Callable[[], T]): One physical attempt.

        Returns:
            The result of the first successful attempt.

        Raises:
            TransportExhaustedError: If the retry budget was spent without a successful attempt.
            Exception: Any error the configured policy does not retry, unchanged.
        """
        try:
            return self._retrying_for(descriptor)(func)
        except tenacity.RetryError as err:
            last_attempt = err.last_attempt
            last_err = last_attempt.exception() if last_attempt.failed else None
            logger.error(
                "Giving up on fetch of gs://%s/%s after %d attempt(s)",
                descriptor.bucket,
                descriptor.name,
                last_attempt.attempt_number,
            )
            raise TransportExhaustedError(
                last_err, last_attempt.attempt_number
            ) from last_err
