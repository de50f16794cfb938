"""
Network operations and HTTP client management.

This module owns the pooled requests session shared by every outbound
call: binary downloads, the network-identity lookup and the aggregator
and keep-alive endpoints.
"""

import logging
import os
from typing import Any, Dict, Optional

import psutil
import requests
from requests.adapters import HTTPAdapter
from tqdm import tqdm
from urllib3.util.retry import Retry

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"

DEFAULT_TIMEOUT = 10
DOWNLOAD_TIMEOUT = 60
DOWNLOAD_CHUNK = 64 * 1024


class HTTPClientManager:
    """Manages a single HTTP session with memory-aware connection pooling."""

    def __init__(self):
        self._session: Optional[requests.Session] = None
        self.logger = logging.getLogger(__name__)

    def _get_memory_pct(self) -> float:
        try:
            return psutil.virtual_memory().percent
        except (OSError, RuntimeError):
            return 50.0

    def _create_session(self, pool_connections: int = 4, pool_maxsize: int = 8) -> requests.Session:
        """Create a requests session; retries stay off so every call fails fast."""
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=pool_connections,
            pool_maxsize=pool_maxsize,
            max_retries=Retry(total=0),
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers["User-Agent"] = USER_AGENT
        return session

    def get_session(self) -> requests.Session:
        """Get or create the shared HTTP session."""
        if self._session is None:
            if self._get_memory_pct() >= 90:
                self._session = self._create_session(1, 2)
            else:
                self._session = self._create_session()
        return self._session

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None

    def download(self, url: str, dest: str, timeout: int = DOWNLOAD_TIMEOUT) -> int:
        """Stream ``url`` into ``dest`` and return the number of bytes written.

        Raises:
            requests.RequestException: on connection errors or a non-2xx status.
            OSError: if the destination cannot be written.
        """
        written = 0
        with self.get_session().get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            total = int(resp.headers.get("Content-Length") or 0) or None
            try:
                with open(dest, "wb") as f, tqdm(
                    total=total, unit="B", unit_scale=True, desc=dest, leave=False, disable=None
                ) as bar:
                    for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK):
                        if not chunk:
                            continue
                        f.write(chunk)
                        written += len(chunk)
                        bar.update(len(chunk))
            except (requests.RequestException, OSError):
                # never leave a truncated executable behind
                if os.path.exists(dest):
                    os.remove(dest)
                raise
        return written

    def get_json(self, url: str, timeout: int = DEFAULT_TIMEOUT) -> Any:
        """GET ``url`` and decode the JSON body.

        Raises:
            requests.RequestException: on transport errors or a non-2xx status.
            ValueError: if the body is not JSON.
        """
        resp = self.get_session().get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.json()

    def post_json(self, url: str, payload: Dict[str, Any], timeout: int = DEFAULT_TIMEOUT) -> requests.Response:
        """POST ``payload`` as JSON; the caller decides what a status code means."""
        return self.get_session().post(url, json=payload, timeout=timeout)
