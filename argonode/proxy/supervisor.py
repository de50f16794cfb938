"""
Fire-and-forget supervision of the proxy engine, tunnel client and monitoring agent.

Processes are started and never waited on. A start failure is logged per
process and never blocks the others.
"""

import logging
import os
import subprocess
from typing import Dict, Iterable, List, Optional

from argonode.core.models import (
    AGENT_CONFIG_FILE,
    BOOT_LOG,
    PROXY_BIN,
    PROXY_CONFIG_FILE,
    PULL_AGENT_BIN,
    PUSH_AGENT_BIN,
    TUNNEL_BIN,
    TUNNEL_CONFIG_FILE,
    RuntimeConfig,
    TunnelCredential,
    TunnelMode,
)

TLS_PORTS = {"443", "8443", "2096", "2087", "2083", "2053"}


def tunnel_args(config: RuntimeConfig, credential: TunnelCredential) -> List[str]:
    """Tunnel client arguments for each credential variant."""
    args = ["tunnel", "--edge-ip-version", "auto"]
    if credential.mode is TunnelMode.TOKEN:
        return args + ["--no-autoupdate", "--protocol", "http2", "run", "--token", credential.value]
    if credential.mode is TunnelMode.STRUCTURED_SECRET:
        return args + ["--config", config.path(TUNNEL_CONFIG_FILE), "run"]
    return args + [
        "--no-autoupdate", "--protocol", "http2",
        "--logfile", config.path(BOOT_LOG), "--loglevel", "info",
        "--url", f"http://localhost:{config.argo_port}",
    ]


def agent_command(config: RuntimeConfig) -> Optional[List[str]]:
    """Full monitoring agent command line, or None when monitoring is off."""
    if not config.monitoring_enabled:
        return None
    if not config.monitoring_push_mode:
        return [config.path(PULL_AGENT_BIN), "-c", config.path(AGENT_CONFIG_FILE)]
    args = [config.path(PUSH_AGENT_BIN), "-s", f"{config.nezha_server}:{config.nezha_port}", "-p", config.nezha_key]
    if config.nezha_port in TLS_PORTS:
        args.append("--tls")
    return args


class ProcessSupervisor:
    """Starts each role once and keeps the handles for shutdown."""

    def __init__(self, config: RuntimeConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.processes: Dict[str, subprocess.Popen] = {}

    def _spawn(self, role: str, args: List[str], output=subprocess.DEVNULL) -> Optional[subprocess.Popen]:
        try:
            process = subprocess.Popen(args, stdin=subprocess.DEVNULL, stdout=output, stderr=output)
        except OSError as e:
            self.logger.error(f"Failed to start {role}: {e}")
            return None
        self.processes[role] = process
        self.logger.info(f"{role} is running")
        return process

    def start_agent(self) -> Optional[subprocess.Popen]:
        command = agent_command(self.config)
        if command is None:
            self.logger.info("NEZHA variable is empty, skipping running")
            return None
        role = PUSH_AGENT_BIN if self.config.monitoring_push_mode else PULL_AGENT_BIN
        return self._spawn(role, command)

    def start_proxy(self) -> Optional[subprocess.Popen]:
        args = [self.config.path(PROXY_BIN), "-c", self.config.path(PROXY_CONFIG_FILE)]
        return self._spawn(PROXY_BIN, args)

    def start_tunnel(self, provisioned: Optional[Iterable[str]] = None) -> Optional[subprocess.Popen]:
        """Start the tunnel client if its binary was provisioned.

        ``provisioned`` is the list returned by the provisioner; without it,
        an existing binary on disk is trusted.
        """
        binary = self.config.path(TUNNEL_BIN)
        if provisioned is not None and binary not in provisioned:
            self.logger.warning(f"{binary} was not provisioned, tunnel client not started")
            return None
        if not os.path.exists(binary):
            self.logger.warning(f"{binary} not found, tunnel client not started")
            return None

        credential = TunnelCredential.classify(self.config.argo_auth)
        args = [binary] + tunnel_args(self.config, credential)
        try:
            log_file = open(self.config.path(BOOT_LOG), "w", encoding="utf-8")
        except OSError as e:
            self.logger.error(f"Failed to open {BOOT_LOG}: {e}")
            return self._spawn(TUNNEL_BIN, args)
        # the child keeps its own descriptor
        with log_file:
            return self._spawn(TUNNEL_BIN, args, output=log_file)

    def start_all(self, provisioned: Optional[Iterable[str]] = None) -> Dict[str, subprocess.Popen]:
        self.start_agent()
        self.start_proxy()
        self.start_tunnel(provisioned)
        return dict(self.processes)

    def stop_all(self, timeout: float = 3.0):
        """Terminate every supervised process that is still alive."""
        for role, process in list(self.processes.items()):
            if process.poll() is not None:
                continue
            try:
                process.terminate()
                process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                process.kill()
            except OSError as e:
                self.logger.debug(f"Failed to stop {role}: {e}")
        self.processes.clear()
