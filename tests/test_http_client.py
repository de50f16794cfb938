import os

import pytest
import requests

from argonode.core.models import Architecture
from argonode.network.http_client import HTTPClientManager
from argonode.proxy.provisioner import BinaryProvisioner
from argonode.proxy.supervisor import ProcessSupervisor


class StreamingResponse:
    def __init__(self, chunks, error=None):
        self.chunks = chunks
        self.error = error
        self.headers = {"Content-Length": "1024"}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        pass

    def iter_content(self, chunk_size=1):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class StreamingSession:
    """Serves every URL in full except those listed in ``broken``."""

    def __init__(self, broken=()):
        self.broken = set(broken)

    def get(self, url, stream=False, timeout=None):
        if url in self.broken:
            return StreamingResponse([b"ELF-partial"], requests.ConnectionError("connection reset"))
        return StreamingResponse([b"ELF", b"-complete"])

    def close(self):
        pass


def manager_with(session):
    manager = HTTPClientManager()
    manager._session = session
    return manager


def test_download_writes_every_chunk(tmp_path):
    dest = str(tmp_path / "web")
    assert manager_with(StreamingSession()).download("https://host/web", dest) == 12
    with open(dest, "rb") as f:
        assert f.read() == b"ELF-complete"


def test_interrupted_download_leaves_no_file(tmp_path):
    dest = str(tmp_path / "bot")
    manager = manager_with(StreamingSession(broken={"https://host/2go"}))
    with pytest.raises(requests.ConnectionError):
        manager.download("https://host/2go", dest)
    assert not os.path.exists(dest)


def test_interrupted_tunnel_download_is_never_launched(config, popen):
    session = StreamingSession(broken={"https://amd64.ssss.nyc.mn/2go"})
    provisioner = BinaryProvisioner(config, manager_with(session), Architecture.AMD)

    provisioned = provisioner.provision()
    assert provisioned == [config.path("web")]
    assert not os.path.exists(config.path("bot"))

    processes = ProcessSupervisor(config).start_all(provisioned)
    assert list(processes) == ["web"]
    assert [call.args[0][0] for call in popen.call_args_list] == [config.path("web")]
