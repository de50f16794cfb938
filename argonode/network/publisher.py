"""
Aggregator publishing and keep-alive registration.

All calls here are best-effort: failures are logged and never abort the
caller.
"""

import logging
from typing import List, Optional

import requests

from argonode.core.models import SUB_FILE, RuntimeConfig
from argonode.core.utils import read_text
from argonode.network.http_client import HTTPClientManager
from argonode.parsers.uri_parser import nodes_from_artifact

VISIT_URL = "https://gifted-steel-cheek.glitch.me/add-url"


class PublishClient:
    """Talks to the optional aggregator that collects nodes or subscriptions."""

    def __init__(self, config: RuntimeConfig, http_manager: HTTPClientManager):
        self.config = config
        self.http_manager = http_manager
        self.logger = logging.getLogger(__name__)

    def _stored_nodes(self) -> List[str]:
        path = self.config.path(SUB_FILE)
        try:
            content = read_text(path)
        except OSError as e:
            self.logger.warning(f"Failed to read {path}: {e}")
            return []
        if not content:
            return []
        return nodes_from_artifact(content)

    def _post(self, endpoint: str, payload: dict) -> Optional[requests.Response]:
        url = self.config.upload_url.rstrip("/") + endpoint
        try:
            resp = self.http_manager.post_json(url, payload)
        except requests.RequestException as e:
            self.logger.warning(f"Request to {url} failed: {e}")
            return None
        resp.close()
        return resp

    def delete_nodes(self) -> int:
        """Ask the aggregator to drop the nodes a previous run registered.

        Returns the number of nodes submitted for deletion.
        """
        if not self.config.upload_url:
            return 0
        nodes = self._stored_nodes()
        if not nodes:
            return 0
        resp = self._post("/api/delete-nodes", {"nodes": nodes})
        if resp is not None and resp.status_code == 200:
            self.logger.info(f"Deleted {len(nodes)} stale nodes")
        elif resp is not None:
            self.logger.warning(f"Node deletion returned HTTP {resp.status_code}")
        return len(nodes)

    def upload(self) -> bool:
        """Publish the subscription URL if a project URL is set, else the raw nodes."""
        if not self.config.upload_url:
            return False

        if self.config.project_url:
            subscription_url = f"{self.config.project_url}/{self.config.sub_path}"
            resp = self._post("/api/add-subscriptions", {"subscription": [subscription_url]})
            if resp is not None and resp.status_code == 200:
                self.logger.info("Subscription uploaded successfully")
                return True
            return False

        nodes = self._stored_nodes()
        if not nodes:
            return False
        resp = self._post("/api/add-nodes", {"nodes": nodes})
        if resp is not None and resp.status_code == 200:
            self.logger.info("Nodes uploaded successfully")
            return True
        return False

    def add_visit_task(self) -> bool:
        """Register the project URL with the keep-alive service."""
        if not self.config.auto_access or not self.config.project_url:
            self.logger.info("Skipping adding automatic access task")
            return False
        try:
            resp = self.http_manager.post_json(VISIT_URL, {"url": self.config.project_url})
            resp.close()
        except requests.RequestException as e:
            self.logger.error(f"Failed to add URL: {e}")
            return False
        self.logger.info("automatic access task added successfully")
        return True
