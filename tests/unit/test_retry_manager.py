import logging
import unittest
from unittest.mock import Mock

from requests.exceptions import (
    ChunkedEncodingError,
    ConnectTimeout,
    ConnectionError as RequestsConnectionError,
    ReadTimeout,
)
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_none

from blobchannel.errors import (
    ObjectNotFoundError,
    PreconditionFailedError,
    RetryableTransportError,
    TransportExhaustedError,
)
from blobchannel.retry_config import NETWORK_RETRY_EXCEPTIONS, RetryConfig
from blobchannel.retry_manager import RetryManager
from blobchannel.types import StorageObject
from tests.const import BUCKET_NAME, OBJ_NAME
from tests.utils import cases, no_wait_retry_config


class TestRetryManager(unittest.TestCase):  # pylint: disable=unused-variable
    def setUp(self) -> None:
        self.descriptor = StorageObject(bucket=BUCKET_NAME, name=OBJ_NAME)
        # Function passed to be retried
        self.primary_func = Mock()
        self.retry_manager = RetryManager(no_wait_retry_config(3))

    def test_default_config(self):
        retry_manager = RetryManager()
        config = retry_manager.retry_config
        self.assertIsInstance(config, RetryConfig)
        self.assertEqual(3, config.http_retry.total)
        self.assertEqual(6, config.network_retry.stop.max_attempt_number)

    def test_config(self):
        retry_config = no_wait_retry_config(5)
        retry_manager = RetryManager(retry_config)
        self.assertEqual(retry_config, retry_manager.retry_config)

    def test_success(self):
        self.primary_func.return_value = "result"
        self.assertEqual(
            "result", self.retry_manager.with_retry(self.descriptor, self.primary_func)
        )
        self.primary_func.assert_called_once_with()

    @cases(
        ConnectTimeout,
        ReadTimeout,
        ChunkedEncodingError,
        RequestsConnectionError,
        RetryableTransportError(503, "Service Unavailable"),
    )
    def test_retry_then_succeed(self, error):
        self.primary_func.reset_mock()
        self.primary_func.side_effect = [error, error, "result"]
        self.assertEqual(
            "result", self.retry_manager.with_retry(self.descriptor, self.primary_func)
        )
        self.assertEqual(3, self.primary_func.call_count)

    def test_retry_exhausted(self):
        error = RetryableTransportError(503, "Service Unavailable")
        self.primary_func.side_effect = error
        with self.assertRaises(TransportExhaustedError) as context:
            self.retry_manager.with_retry(self.descriptor, self.primary_func)
        self.assertEqual(3, self.primary_func.call_count)
        self.assertEqual(3, context.exception.attempts)
        self.assertIs(error, context.exception.original_error)
        self.assertIs(error, context.exception.__cause__)

    def test_retry_exhausted_logs(self):
        self.primary_func.side_effect = ConnectTimeout
        with self.assertLogs("blobchannel.retry_manager", level=logging.WARNING) as logs:
            with self.assertRaises(TransportExhaustedError):
                self.retry_manager.with_retry(self.descriptor, self.primary_func)
        warnings = [rec for rec in logs.records if rec.levelno == logging.WARNING]
        errors = [rec for rec in logs.records if rec.levelno == logging.ERROR]
        self.assertEqual(2, len(warnings))
        self.assertEqual(1, len(errors))
        self.assertIn(OBJ_NAME, errors[0].getMessage())

    @cases(
        ObjectNotFoundError(404, "Not Found"),
        PreconditionFailedError(412, "Precondition Failed"),
        ValueError("not a network error"),
    )
    def test_non_retryable_error(self, error):
        self.primary_func.reset_mock()
        self.primary_func.side_effect = error
        with self.assertRaises(type(error)):
            self.retry_manager.with_retry(self.descriptor, self.primary_func)
        self.primary_func.assert_called_once()

    def test_configured_before_sleep_called(self):
        before_sleep = Mock()
        config = RetryConfig.default()
        config.network_retry = Retrying(
            wait=wait_none(),
            stop=stop_after_attempt(2),
            retry=retry_if_exception_type(NETWORK_RETRY_EXCEPTIONS),
            before_sleep=before_sleep,
            reraise=True,
        )
        self.primary_func.side_effect = [ConnectTimeout, "result"]
        RetryManager(config).with_retry(self.descriptor, self.primary_func)
        before_sleep.assert_called_once()

    def test_configured_retrying_not_modified(self):
        config = no_wait_retry_config(2)
        network_retry = config.network_retry
        self.primary_func.side_effect = ConnectTimeout
        with self.assertRaises(TransportExhaustedError):
            RetryManager(config).with_retry(self.descriptor, self.primary_func)
        self.assertIs(network_retry, config.network_retry)
        self.assertTrue(network_retry.reraise)
