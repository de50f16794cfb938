"""
Removal of transient files from the working directory.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from argonode.core.models import (
    BOOT_LOG,
    LIST_FILE,
    PROXY_BIN,
    PROXY_CONFIG_FILE,
    PULL_AGENT_BIN,
    PUSH_AGENT_BIN,
    SUB_FILE,
    TUNNEL_BIN,
    RuntimeConfig,
)
from argonode.core.utils import remove_files

# Left behind by a previous run, removed before anything is rendered
STALE_FILES = [PROXY_BIN, TUNNEL_BIN, PUSH_AGENT_BIN, SUB_FILE, BOOT_LOG]

# Removed once the node is up
TRANSIENT_FILES = [BOOT_LOG, PROXY_CONFIG_FILE, LIST_FILE, PUSH_AGENT_BIN, PROXY_BIN, TUNNEL_BIN, PULL_AGENT_BIN]

CLEANUP_DELAY = 15.0


def purge_stale_files(config: RuntimeConfig) -> List[str]:
    return remove_files(config.path(name) for name in STALE_FILES)


class CleanupScheduler:
    """Deletes logs, rendered configs and binaries after a grace period."""

    def __init__(self, config: RuntimeConfig, delay: float = CLEANUP_DELAY,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.delay = delay
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)
        self._thread: Optional[threading.Thread] = None

    def run_now(self) -> List[str]:
        """Delete every transient file that exists; missing ones are ignored."""
        removed = remove_files(self.config.path(name) for name in TRANSIENT_FILES)
        self.logger.info("App is running")
        self.logger.info("Thank you for using this script, enjoy!")
        return removed

    def _run(self):
        self.sleep(self.delay)
        self.run_now()

    def schedule(self) -> threading.Thread:
        """Run the cleanup in a daemon thread after ``delay`` seconds."""
        self._thread = threading.Thread(target=self._run, daemon=True, name="cleanup")
        self._thread.start()
        return self._thread
