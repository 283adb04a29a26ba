"""gocancel client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

DEFAULT_BASE_URL = "https://app.gocxl.com/"
DEFAULT_USER_AGENT = "gocancel-python"


@dataclass
class ClientConfig:
    """GoCancel API client configuration.

    base_url must end with a trailing slash; request paths are resolved
    relative to it.
    """

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 10.0
    access_token: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    def with_user_agent(self, prefix: str) -> ClientConfig:
        """Return a copy whose user agent is prefixed with prefix."""
        return replace(
            self,
            user_agent=f"{prefix} {self.user_agent}",
            headers=dict(self.headers),
        )
