import os
import stat

import pytest

from argonode.core.models import Architecture, RuntimeConfig
from argonode.proxy.provisioner import BinaryProvisioner, detect_architecture, files_for_architecture

PUSH = dict(nezha_server="nz.example.com", nezha_port="443", nezha_key="k")
PULL = dict(nezha_server="nz.example.com:5555", nezha_key="k")


@pytest.mark.parametrize("machine,expected", [
    ("aarch64", Architecture.ARM),
    ("arm64", Architecture.ARM),
    ("armv7l", Architecture.ARM),
    ("x86_64", Architecture.AMD),
    ("AMD64", Architecture.AMD),
    ("", Architecture.AMD),
])
def test_detect_architecture(machine, expected):
    assert detect_architecture(machine) is expected


@pytest.mark.parametrize("architecture", list(Architecture))
@pytest.mark.parametrize("monitoring,agent", [({}, None), (PUSH, "npm"), (PULL, "php")])
def test_file_set_per_monitoring_mode(architecture, monitoring, agent):
    files = files_for_architecture(architecture, RuntimeConfig(**monitoring))
    names = [spec.file_name for spec in files]
    expected = ["web", "bot"] if agent is None else [agent, "web", "bot"]
    assert names == expected
    assert len({"npm", "php"} & set(names)) <= 1


def test_urls_follow_architecture():
    arm = files_for_architecture(Architecture.ARM, RuntimeConfig(**PUSH))
    amd = files_for_architecture(Architecture.AMD, RuntimeConfig(**PULL))
    assert [spec.url for spec in arm] == [
        "https://arm64.ssss.nyc.mn/agent",
        "https://arm64.ssss.nyc.mn/web",
        "https://arm64.ssss.nyc.mn/2go",
    ]
    assert [spec.url for spec in amd] == [
        "https://amd64.ssss.nyc.mn/v1",
        "https://amd64.ssss.nyc.mn/web",
        "https://amd64.ssss.nyc.mn/2go",
    ]


def test_provision_marks_files_executable(config, http_manager):
    paths = BinaryProvisioner(config, http_manager, Architecture.AMD).provision()
    assert paths == [config.path("web"), config.path("bot")]
    for path in paths:
        assert os.stat(path).st_mode & stat.S_IXUSR


def test_failed_download_does_not_stop_the_rest(config, http_manager):
    http_manager.fail_downloads.add("https://amd64.ssss.nyc.mn/web")
    paths = BinaryProvisioner(config, http_manager, Architecture.AMD).provision()
    assert paths == [config.path("bot")]
    assert not os.path.exists(config.path("web"))
    assert [d["url"] for d in http_manager.downloads] == ["https://amd64.ssss.nyc.mn/2go"]
