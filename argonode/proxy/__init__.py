"""
Proxy package: configuration rendering, binary provisioning and process supervision.
"""

from .config_generator import ConfigGenerator, build_agent_document, build_proxy_document
from .provisioner import BinaryProvisioner, detect_architecture, files_for_architecture
from .supervisor import ProcessSupervisor, agent_command, tunnel_args

__all__ = [
    "ConfigGenerator",
    "build_agent_document",
    "build_proxy_document",
    "BinaryProvisioner",
    "detect_architecture",
    "files_for_architecture",
    "ProcessSupervisor",
    "agent_command",
    "tunnel_args",
]
