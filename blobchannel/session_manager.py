"""
Copyright (c) 2025, NVIDIA CORPORATION. All rights reserved.
"""

import os
from multiprocessing import current_process
from typing import Dict, Optional, Union

from requests import Session
from requests.adapters import HTTPAdapter
from urllib3 import Retry

from blobchannel.const import BLOBCHANNEL_CA_BUNDLE, HTTP, HTTPS
from blobchannel.retry_config import RetryConfig


class SessionManager:
    """
    Hands out the `requests` session used by `HttpStorageBackend` for its ranged fetches.

    One session is built per process id: a channel restored in a forked or spawned worker never reuses
    the connection pool of the process that captured it.

    Args:
        retry (urllib3.Retry, optional): Status-code retries applied inside a single fetch by the
            connection adapter. Defaults to `RetryConfig.default().http_retry`.
        ca_cert (str, optional): CA bundle used to verify the storage endpoint. Defaults to the
            `BLOBCHANNEL_CA_BUNDLE` environment variable, then the system trust store.
        skip_verify (bool, optional): Disable TLS verification entirely. Defaults to False.
        max_pool_size (int, optional): Connections kept per host. Defaults to 10.
    """

    def __init__(
        self,
        retry: Optional[Retry] = None,
        ca_cert: Optional[str] = None,
        skip_verify: bool = False,
        max_pool_size: int = 10,
    ):
        self._retry = retry or RetryConfig.default().http_retry
        self._ca_cert = ca_cert
        self._skip_verify = skip_verify
        self._max_pool_size = max_pool_size
        self._sessions: Dict[int, Session] = {}

    @property
    def retry(self) -> Retry:
        """Adapter-level retry of this manager's sessions."""
        return self._retry

    @property
    def ca_cert(self) -> Optional[str]:
        """CA bundle passed at construction, if any."""
        return self._ca_cert

    @property
    def skip_verify(self) -> bool:
        """Whether TLS verification is disabled."""
        return self._skip_verify

    @property
    def session(self) -> Session:
        """Session of the calling process, built on first use."""
        pid = current_process().pid
        session = self._sessions.get(pid)
        if session is None:
            session = self._build_session()
            self._sessions[pid] = session
        return session

    def _verify_setting(self) -> Union[bool, str]:
        # Explicit argument, then environment, then the system trust store
        if self._skip_verify:
            return False
        return self._ca_cert or os.getenv(BLOBCHANNEL_CA_BUNDLE) or True

    def _build_session(self) -> Session:
        session = Session()
        session.verify = self._verify_setting()
        adapter = HTTPAdapter(
            max_retries=self._retry,
            pool_connections=self._max_pool_size,
            pool_maxsize=self._max_pool_size,
        )
        for prefix in (HTTP, HTTPS):
            session.mount(prefix, adapter)
        return session
