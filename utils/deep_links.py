"""
Deep link routing.

Links arrive either on the custom scheme (vinho://invite/abc) or as web
links on the app's domain (https://vinho.dev/invite/abc).
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse
from uuid import UUID

APP_SCHEME = "vinho"
WEB_HOSTS = ("vinho.dev", "www.vinho.dev")

INVITE = "invite"
SHARING_ACCEPT = "sharing_accept"


@dataclass(frozen=True)
class DeepLink:
    destination: str
    invite_code: Optional[str] = None
    connection_id: Optional[str] = None


def _path_components(url: str) -> Optional[list[str]]:
    parsed = urlparse(url.strip())
    scheme = parsed.scheme.lower()

    if scheme == APP_SCHEME:
        # vinho://invite/abc parses "invite" as the host
        parts = [parsed.netloc] + parsed.path.split("/")
    elif scheme in ("http", "https") and parsed.hostname in WEB_HOSTS:
        parts = parsed.path.split("/")
    else:
        return None

    return [p for p in parts if p]


def resolve_deep_link(url: Optional[str]) -> Optional[DeepLink]:
    """
    Map a URL to an in-app destination.

    Routes:
        /invite/{code}                 -> invite
        /sharing/accept/{connection}   -> sharing_accept (legacy links)

    Returns:
        DeepLink, or None when the URL is not ours or has no route
    """
    if not url:
        return None

    parts = _path_components(url)
    if not parts:
        return None

    if len(parts) >= 2 and parts[0] == "invite":
        return DeepLink(destination=INVITE, invite_code=parts[1])

    if len(parts) >= 3 and parts[0] == "sharing" and parts[1] == "accept":
        try:
            connection_id = str(UUID(parts[2]))
        except ValueError:
            return None
        return DeepLink(destination=SHARING_ACCEPT, connection_id=connection_id)

    return None
