"""Test doubles shared across the argonode test suite."""

import base64
import json
from typing import Any, Dict, List

import requests


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload
        self.closed = False

    def json(self):
        return self._payload

    def close(self):
        self.closed = True


class FakeHTTPManager:
    """Records outbound calls instead of touching the network."""

    def __init__(self, meta: Any = None, status_code: int = 200):
        self.meta = meta if meta is not None else {"country": "US", "asOrganization": "Example Networks"}
        self.status_code = status_code
        self.posts: List[Dict[str, Any]] = []
        self.downloads: List[Dict[str, str]] = []
        self.get_json_error = None
        self.fail_downloads = set()
        self.closed = False

    def get_json(self, url, timeout=10):
        if self.get_json_error is not None:
            raise self.get_json_error
        return self.meta

    def post_json(self, url, payload, timeout=10):
        self.posts.append({"url": url, "payload": payload})
        return FakeResponse(self.status_code)

    def download(self, url, dest, timeout=60):
        if url in self.fail_downloads:
            raise requests.ConnectionError(f"cannot reach {url}")
        with open(dest, "wb") as f:
            f.write(b"#!/bin/sh\n")
        self.downloads.append({"url": url, "dest": dest})
        return 10

    def close(self):
        self.closed = True


def make_artifact(lines: List[str]) -> str:
    return base64.b64encode("\n".join(lines).encode("utf-8")).decode("ascii")


STRUCTURED_SECRET = json.dumps({
    "AccountTag": "abc123",
    "TunnelSecret": "c2VjcmV0LWtleS1tYXRlcmlhbA==",
    "TunnelID": "6ff42ae2-765d-4adf-8112-31c55c1551ef",
})

TOKEN = "eyJhIjoi" + "A" * 142
