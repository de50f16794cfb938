"""
Platform-specific executable provisioning.

Resolves which binaries this host needs and fetches them into the
working directory. Fetching is best-effort: one failed download never
stops the others.
"""

import logging
import os
import platform
from typing import List, Optional

import requests

from argonode.core.models import (
    PROXY_BIN,
    PULL_AGENT_BIN,
    PUSH_AGENT_BIN,
    TUNNEL_BIN,
    Architecture,
    BinarySpec,
    RuntimeConfig,
)
from argonode.network.http_client import HTTPClientManager

DOWNLOAD_HOSTS = {
    Architecture.ARM: "https://arm64.ssss.nyc.mn",
    Architecture.AMD: "https://amd64.ssss.nyc.mn",
}

# local name -> remote name
REMOTE_NAMES = {
    PROXY_BIN: "web",
    TUNNEL_BIN: "2go",
    PUSH_AGENT_BIN: "agent",
    PULL_AGENT_BIN: "v1",
}

ARM_MACHINES = ("arm", "aarch64")


def detect_architecture(machine: Optional[str] = None) -> Architecture:
    """Map ``platform.machine()`` onto the two supported classes."""
    machine = (machine if machine is not None else platform.machine()).lower()
    if machine.startswith(ARM_MACHINES):
        return Architecture.ARM
    return Architecture.AMD


def files_for_architecture(architecture: Architecture, config: RuntimeConfig) -> List[BinarySpec]:
    """Ordered list of binaries to fetch: optional monitoring agent, proxy engine, tunnel client."""
    host = DOWNLOAD_HOSTS[architecture]
    names = [PROXY_BIN, TUNNEL_BIN]
    if config.monitoring_enabled:
        names.insert(0, PUSH_AGENT_BIN if config.monitoring_push_mode else PULL_AGENT_BIN)
    return [BinarySpec(name, f"{host}/{REMOTE_NAMES[name]}") for name in names]


class BinaryProvisioner:
    """Downloads the executables needed for this host and marks them executable."""

    def __init__(self, config: RuntimeConfig, http_manager: HTTPClientManager,
                 architecture: Optional[Architecture] = None):
        self.config = config
        self.http_manager = http_manager
        self.architecture = architecture or detect_architecture()
        self.logger = logging.getLogger(__name__)

    def plan(self) -> List[BinarySpec]:
        return files_for_architecture(self.architecture, self.config)

    def provision(self) -> List[str]:
        """Fetch every planned binary; return the paths that made it to disk."""
        os.makedirs(self.config.file_path, exist_ok=True)
        provisioned = []
        for spec in self.plan():
            path = self.config.path(spec.file_name)
            try:
                self.http_manager.download(spec.url, path)
            except (requests.RequestException, OSError) as e:
                self.logger.error(f"Failed to download {spec.file_name} from {spec.url}: {e}")
                continue
            self.logger.info(f"Successfully downloaded {spec.file_name}")

            try:
                os.chmod(path, 0o755)
            except OSError as e:
                self.logger.error(f"Failed to set permissions on {path}: {e}")
            provisioned.append(path)
        return provisioned
