"""
Core configuration management for the argonode system.

This module handles configuration loading and validation from built-in
defaults, an optional secrets file and environment variables, and
produces the immutable RuntimeConfig snapshot the pipeline runs on.
"""

import logging
import os
import re
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Tuple

from argonode.core.models import RuntimeConfig


def _as_bool(value: str) -> bool:
    return value.lower() == "true"


class NodeConfig:
    """Central configuration manager for the node bootstrap."""

    # env key -> (config key, converter); later entries win
    ENV_MAPPINGS: List[Tuple[str, str, Callable[[str], Any]]] = [
        ("UPLOAD_URL", "upload_url", str),
        ("PROJECT_URL", "project_url", str),
        ("AUTO_ACCESS", "auto_access", _as_bool),
        ("FILE_PATH", "file_path", str),
        ("SUB_PATH", "sub_path", str),
        ("PORT", "port", int),
        ("SERVER_PORT", "port", int),
        ("UUID", "uuid", str),
        ("NEZHA_SERVER", "nezha_server", str),
        ("NEZHA_PORT", "nezha_port", str),
        ("NEZHA_KEY", "nezha_key", str),
        ("ARGO_DOMAIN", "argo_domain", str),
        ("ARGO_AUTH", "argo_auth", str),
        ("ARGO_PORT", "argo_port", int),
        ("CFIP", "cf_ip", str),
        ("CFPORT", "cf_port", int),
        ("NAME", "name", str),
    ]

    def __init__(self, secrets_file: Optional[str] = None,
                 environ: Optional[MutableMapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.secrets_file = secrets_file or self.environ.get("ARGONODE_SECRETS_FILE", "node_secrets.env")
        self.logger = logging.getLogger(__name__)
        self._config: Dict[str, Any] = {}
        self._load_default_config()
        self._load_env_file()
        self._load_from_environment()

    def _load_default_config(self):
        """Load default configuration values."""
        defaults = RuntimeConfig()
        self._config = {name: getattr(defaults, name) for name in defaults.__dataclass_fields__}

    def _load_env_file(self):
        """Load configuration from the secrets file without overriding real env vars."""
        if not self.secrets_file or not os.path.exists(self.secrets_file):
            return
        try:
            with open(self.secrets_file, "r", encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()
                    if not line or line.startswith("#"):
                        continue

                    key = None
                    value = None

                    # PowerShell style: $env:NAME = value
                    if line.lower().startswith("$env:"):
                        m = re.match(r"^\$env:([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.+)$", line)
                        if m:
                            key = m.group(1).strip()
                            value = m.group(2).strip()
                    elif "=" in line:
                        left, right = line.split("=", 1)
                        key = left.strip()
                        value = right.strip()

                    if key and value is not None:
                        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                            value = value[1:-1]
                        self.environ.setdefault(key, value)
        except OSError as e:
            self.logger.warning(f"Failed to load env file {self.secrets_file}: {e}")

    def _load_from_environment(self):
        """Override configuration with environment variables."""
        for env_key, config_key, converter in self.ENV_MAPPINGS:
            if env_key not in self.environ:
                continue
            raw = self.environ[env_key]
            try:
                self._config[config_key] = converter(raw)
            except (ValueError, TypeError):
                self.logger.warning(f"Invalid value for {env_key}: {raw!r}, keeping {self._config[config_key]!r}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return self._config.copy()

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        warnings = []

        for key in ("port", "argo_port", "cf_port"):
            value = self.get(key)
            if not isinstance(value, int) or not 1 <= value <= 65535:
                errors.append(f"{key} must be between 1 and 65535")

        if not self.get("uuid"):
            errors.append("UUID must not be empty")

        if bool(self.get("nezha_server")) != bool(self.get("nezha_key")):
            warnings.append("NEZHA_SERVER and NEZHA_KEY must both be set - monitoring agent disabled")
        if self.get("project_url") and not self.get("upload_url"):
            warnings.append("PROJECT_URL set without UPLOAD_URL - subscription will not be published")

        for warning in warnings:
            self.logger.warning(warning)

        return errors

    def snapshot(self) -> RuntimeConfig:
        """Freeze the current values into a RuntimeConfig."""
        return RuntimeConfig(**self._config)
