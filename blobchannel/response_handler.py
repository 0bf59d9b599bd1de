#
# Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
#

from typing import Type

import requests

from blobchannel.const import (
    RETRYABLE_STATUS_CODES,
    STATUS_NOT_FOUND,
    STATUS_PRECONDITION_FAILED,
)
from blobchannel.errors import (
    ObjectNotFoundError,
    PreconditionFailedError,
    RetryableTransportError,
    TransportError,
)


class ResponseHandler:
    """
    Handle responses from the storage service, raising a `TransportError` for failed requests
    """

    def handle_response(self, r: requests.Response) -> requests.Response:
        """
        Method compatible with `requests` hook signature to process an HTTP response

        Args:
            r (requests.Response): Response from the server
        """
        if 200 <= r.status_code < 400:
            return r
        # Raise wrapped HTTPError if response indicates
        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError as http_err:
            # Raise specific error type but keep full HTTPError with stack trace
            raise self.parse_error(r) from http_err
        # If not an expected status code, raise general error
        raise self.exc_class(r.status_code, r.text, r.request.url or "")

    @property
    def exc_class(self) -> Type[TransportError]:
        """Exception class for generic error handling"""
        return TransportError

    def parse_error(self, r: requests.Response) -> TransportError:
        """
        Parse response contents to raise an appropriate TransportError object.

        Args:
            r (requests.Response): Failed response

        Returns:
            ObjectNotFoundError: On 404.
            PreconditionFailedError: On 412.
            RetryableTransportError: On 408, 429 and 5xx responses.
            TransportError: If the error doesn't match any specific conditions.
        """
        status, message, req_url = r.status_code, r.text, r.request.url
        exc = self.exc_class
        if status == STATUS_NOT_FOUND:
            exc = ObjectNotFoundError
        elif status == STATUS_PRECONDITION_FAILED:
            exc = PreconditionFailedError
        elif status in RETRYABLE_STATUS_CODES or status >= 500:
            exc = RetryableTransportError
        return exc(status, message, req_url or "")
