import unittest
from unittest.mock import Mock

import requests

from blobchannel.errors import (
    ObjectNotFoundError,
    PreconditionFailedError,
    RetryableTransportError,
    TransportError,
)
from blobchannel.response_handler import ResponseHandler
from tests.utils import cases, create_error_response


# pylint: disable=unused-variable
class TestResponseHandler(unittest.TestCase):
    def setUp(self):
        self.resp_handler = ResponseHandler()
        self.test_url = "http://test-url"

    def test_exc_class(self):
        self.assertEqual(TransportError, self.resp_handler.exc_class)

    @cases(200, 206, 299, 300)
    def test_handle_response_no_err_code(self, status):
        mock_response = Mock(status_code=status)
        self.assertEqual(
            mock_response, self.resp_handler.handle_response(mock_response)
        )
        mock_response.raise_for_status.assert_not_called()

    @cases(
        (400, TransportError),
        (401, TransportError),
        (403, TransportError),
        (404, ObjectNotFoundError),
        (408, RetryableTransportError),
        (412, PreconditionFailedError),
        (429, RetryableTransportError),
        (500, RetryableTransportError),
        (503, RetryableTransportError),
        (507, RetryableTransportError),
    )
    def test_handle_response_err_code(self, test_case):
        status, exc_type = test_case
        response = create_error_response(self.test_url, status, "msg")
        with self.assertRaises(exc_type) as context:
            self.resp_handler.handle_response(response)
        # Raised from HTTPError to keep the original context
        self.assertIsInstance(
            context.exception.__cause__, requests.exceptions.HTTPError
        )
        self.assertIs(exc_type, type(context.exception))
        self.assertEqual(status, context.exception.status_code)
        self.assertEqual("msg", context.exception.message)
        self.assertEqual(self.test_url, context.exception.req_url)

    def test_handle_response_unexpected_code(self):
        response = create_error_response(self.test_url, 199, "msg")
        with self.assertRaises(TransportError) as context:
            self.resp_handler.handle_response(response)
        self.assertIsNone(context.exception.__cause__)
        self.assertEqual(199, context.exception.status_code)
