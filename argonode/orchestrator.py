"""
Node orchestrator - startup pipeline for the tunneled proxy endpoint.

This module coordinates the full bootstrap: clearing state from a previous
run, rendering configuration, provisioning and launching binaries,
discovering the public hostname, and generating and publishing links.
"""

import logging
import os
from typing import Optional

from argonode.core.cleanup import CleanupScheduler, purge_stale_files
from argonode.core.errors import NodeError
from argonode.core.models import SUB_FILE, RuntimeConfig
from argonode.network.http_client import HTTPClientManager
from argonode.network.publisher import PublishClient
from argonode.proxy.config_generator import ConfigGenerator
from argonode.proxy.provisioner import BinaryProvisioner
from argonode.proxy.supervisor import ProcessSupervisor
from argonode.subscription.links import LinkGenerator
from argonode.tunnel.resolver import DomainResolver


class NodeOrchestrator:
    """Runs the startup pipeline stages strictly in order."""

    def __init__(self, config: RuntimeConfig, http_manager: Optional[HTTPClientManager] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.http_manager = http_manager or HTTPClientManager()
        self.generator = ConfigGenerator(config)
        self.provisioner = BinaryProvisioner(config, self.http_manager)
        self.supervisor = ProcessSupervisor(config)
        self.resolver = DomainResolver(config)
        self.links = LinkGenerator(config, self.http_manager)
        self.publisher = PublishClient(config, self.http_manager)
        self.cleanup = CleanupScheduler(config)

    def prepare(self):
        """Create the working directory and clear what a previous run left behind."""
        try:
            os.makedirs(self.config.file_path, mode=0o775, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Failed to create directory {self.config.file_path}: {e}")

        # must run before the purge, which removes the old artifact
        self.publisher.delete_nodes()
        purge_stale_files(self.config)

    def refresh_subscription(self) -> str:
        """Resolve the domain, regenerate links and publish them.

        Raises:
            DomainResolutionError: if the quick-tunnel hostname never appears.
            LinkGenerationError: if links cannot be generated or saved.
        """
        domain = self.resolver.resolve()
        encoded = self.links.generate(domain)
        self.publisher.upload()
        return encoded

    def start_services(self) -> str:
        """Render, provision, launch, discover, publish, then schedule cleanup."""
        self.generator.render_all()
        provisioned = self.provisioner.provision()
        self.supervisor.start_all(provisioned)
        encoded = self.refresh_subscription()
        self.cleanup.schedule()
        return encoded

    def run(self) -> bool:
        """Run the whole startup sequence; return True if the node came up."""
        self.prepare()
        try:
            self.start_services()
            ok = True
        except NodeError as e:
            self.logger.error(f"Failed to start services: {e}")
            ok = False
        self.publisher.add_visit_task()
        return ok

    def read_subscription(self) -> str:
        """Raw contents of the current subscription artifact.

        Raises:
            OSError: if the artifact cannot be read.
        """
        with open(self.config.path(SUB_FILE), "r", encoding="utf-8") as f:
            return f.read()

    def stop(self):
        self.supervisor.stop_all()
        self.http_manager.close()
