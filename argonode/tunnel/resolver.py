"""
Public hostname discovery for the tunnel.

A fixed tunnel knows its hostname up front. A quick tunnel is assigned
one at random and only reports it in the tunnel client's log, so the log
is polled until the hostname shows up or the attempt budget runs out.
"""

import logging
import re
import time
from typing import Callable, Optional

from argonode.core.errors import DomainResolutionError, PollTimeoutError
from argonode.core.models import BOOT_LOG, RuntimeConfig
from argonode.core.utils import poll_until, read_text

QUICK_TUNNEL_PATTERN = re.compile(r"https?://([^/]*trycloudflare\.com)/?")

POLL_ATTEMPTS = 30
POLL_INTERVAL = 1.0


def find_quick_tunnel_domain(text: Optional[str]) -> Optional[str]:
    """Return the first quick-tunnel hostname in ``text``, if any."""
    if not text:
        return None
    match = QUICK_TUNNEL_PATTERN.search(text)
    return match.group(1) if match else None


class DomainResolver:
    """Resolves the hostname clients should use to reach the tunnel."""

    def __init__(self, config: RuntimeConfig,
                 log_reader: Optional[Callable[[], Optional[str]]] = None,
                 attempts: int = POLL_ATTEMPTS,
                 interval: float = POLL_INTERVAL,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.log_reader = log_reader or (lambda: read_text(config.path(BOOT_LOG)))
        self.attempts = attempts
        self.interval = interval
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

    def resolve(self) -> str:
        """Return the tunnel hostname.

        Raises:
            DomainResolutionError: if the quick-tunnel hostname never appears.
        """
        if self.config.fixed_tunnel:
            self.logger.info(f"ARGO_DOMAIN: {self.config.argo_domain}")
            return self.config.argo_domain

        try:
            domain = poll_until(
                lambda: find_quick_tunnel_domain(self.log_reader()),
                attempts=self.attempts,
                interval=self.interval,
                sleep=self.sleep,
                what="ArgoDomain",
            )
        except PollTimeoutError as e:
            raise DomainResolutionError(
                f"Failed to get ArgoDomain after {e.attempts} attempts", e.attempts
            ) from e

        self.logger.info(f"ArgoDomain: {domain}")
        return domain
