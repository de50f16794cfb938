import dataclasses
import logging
import os

import pytest
import requests

from argonode.network.publisher import VISIT_URL, PublishClient
from helpers import FakeHTTPManager, make_artifact

NODES = [
    "vless://abc@edge.example.com:443?security=tls#node",
    "trojan://abc@edge.example.com:443?security=tls#node",
]


@pytest.fixture
def stored(config):
    with open(config.path("sub.txt"), "w", encoding="utf-8") as f:
        f.write(make_artifact(["", NODES[0], "", "not a node", NODES[1], ""]))
    return config


def client_for(config, http_manager, **changes):
    return PublishClient(dataclasses.replace(config, **changes), http_manager)


class TestDeleteNodes:

    def test_submits_stored_nodes(self, stored, http_manager):
        client = client_for(stored, http_manager, upload_url="https://merge.example.com/")
        assert client.delete_nodes() == 2
        assert http_manager.posts == [{
            "url": "https://merge.example.com/api/delete-nodes",
            "payload": {"nodes": NODES},
        }]

    def test_nothing_without_upload_url(self, stored, http_manager):
        assert PublishClient(stored, http_manager).delete_nodes() == 0
        assert http_manager.posts == []

    def test_nothing_without_artifact(self, config, http_manager):
        client = client_for(config, http_manager, upload_url="https://merge.example.com")
        assert client.delete_nodes() == 0
        assert http_manager.posts == []

    def test_network_failure_is_not_raised(self, stored, http_manager):
        def fail(url, payload, timeout=10):
            raise requests.ConnectionError("offline")
        http_manager.post_json = fail
        client = client_for(stored, http_manager, upload_url="https://merge.example.com")
        assert client.delete_nodes() == 2

    def test_unreadable_artifact_is_not_raised(self, config, http_manager):
        os.mkdir(config.path("sub.txt"))
        client = client_for(config, http_manager, upload_url="https://merge.example.com")
        assert client.delete_nodes() == 0
        assert http_manager.posts == []

    def test_rejected_deletion_is_logged(self, stored, caplog):
        http_manager = FakeHTTPManager(status_code=503)
        client = client_for(stored, http_manager, upload_url="https://merge.example.com")
        with caplog.at_level(logging.WARNING, logger="argonode.network.publisher"):
            assert client.delete_nodes() == 2
        assert "Node deletion returned HTTP 503" in caplog.text

    def test_accepted_deletion_is_logged(self, stored, http_manager, caplog):
        client = client_for(stored, http_manager, upload_url="https://merge.example.com")
        with caplog.at_level(logging.INFO, logger="argonode.network.publisher"):
            client.delete_nodes()
        assert "Deleted 2 stale nodes" in caplog.text


class TestUpload:

    def test_subscription_mode(self, stored, http_manager):
        client = client_for(stored, http_manager, upload_url="https://merge.example.com",
                            project_url="https://node.example.com", sub_path="feed")
        assert client.upload() is True
        assert http_manager.posts == [{
            "url": "https://merge.example.com/api/add-subscriptions",
            "payload": {"subscription": ["https://node.example.com/feed"]},
        }]

    def test_nodes_mode(self, stored, http_manager):
        client = client_for(stored, http_manager, upload_url="https://merge.example.com")
        assert client.upload() is True
        assert http_manager.posts[0]["url"] == "https://merge.example.com/api/add-nodes"
        assert http_manager.posts[0]["payload"] == {"nodes": NODES}

    def test_non_200_is_failure(self, stored):
        http_manager = FakeHTTPManager(status_code=400)
        client = client_for(stored, http_manager, upload_url="https://merge.example.com")
        assert client.upload() is False

    def test_skipped_without_upload_url(self, stored, http_manager):
        assert PublishClient(stored, http_manager).upload() is False
        assert http_manager.posts == []


class TestVisitTask:

    def test_registers_project_url(self, config, http_manager):
        client = client_for(config, http_manager, auto_access=True, project_url="https://node.example.com")
        assert client.add_visit_task() is True
        assert http_manager.posts == [{"url": VISIT_URL, "payload": {"url": "https://node.example.com"}}]

    @pytest.mark.parametrize("changes", [
        {"auto_access": False, "project_url": "https://node.example.com"},
        {"auto_access": True, "project_url": ""},
    ])
    def test_skipped(self, config, http_manager, changes):
        assert client_for(config, http_manager, **changes).add_visit_task() is False
        assert http_manager.posts == []
