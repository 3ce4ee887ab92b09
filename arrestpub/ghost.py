"""
Ghost Admin API client.
"""

import time
from typing import Any, Dict, Optional

import jwt
import requests

from arrestpub.config import Config
from arrestpub.log import get_logger
from arrestpub.model import ConfigError, PublishError

logger = get_logger(__name__)

TOKEN_LIFETIME_SECONDS = 5 * 60


def make_admin_token(admin_api_key: str, now: Optional[int] = None) -> str:
    """
    Sign a short-lived admin token from an "<id>:<hex secret>" key.

    Args:
        admin_api_key: Admin API key from the CMS integration settings
        now: Issue time in epoch seconds

    Returns:
        Encoded JWT
    """
    try:
        key_id, secret = admin_api_key.split(":", 1)
        secret_bytes = bytes.fromhex(secret)
    except (AttributeError, ValueError):
        raise ConfigError("GHOST_ADMIN_API_KEY must have the form <id>:<hex secret>",
                          missing=["GHOST_ADMIN_API_KEY"])

    iat = int(time.time()) if now is None else int(now)
    payload = {"iat": iat, "exp": iat + TOKEN_LIFETIME_SECONDS, "aud": "/admin/"}
    return jwt.encode(payload, secret_bytes, algorithm="HS256", headers={"kid": key_id})


class GhostAdminClient:
    """Client for the Ghost Admin API."""

    def __init__(self, site_url: str, admin_api_key: str, api_version: str = "v5.0",
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.site_url = site_url.rstrip("/")
        self.admin_api_key = admin_api_key
        self.api_version = api_version
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, cfg: Config, session: Optional[requests.Session] = None) -> "GhostAdminClient":
        return cls(cfg.ghost.site_url, cfg.ghost.admin_api_key, cfg.ghost.api_version,
                   cfg.http.timeout, session)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Ghost {make_admin_token(self.admin_api_key)}",
            "Content-Type": "application/json",
            "Accept-Version": self.api_version,
        }

    def create_post(self, post: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a post.

        Args:
            post: Post fields; an "html" body is sent with source=html

        Returns:
            The created post as returned by the API

        Raises:
            PublishError: If the request fails or the API rejects the post
        """
        url = f"{self.site_url}/ghost/api/admin/posts/"
        params = {"source": "html"} if "html" in post else None

        try:
            response = self.session.post(url, json={"posts": [post]}, params=params,
                                         headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise PublishError(f"Failed to reach CMS: {e}")

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise PublishError(
                f"CMS rejected post with HTTP {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )

        posts = response.json().get("posts") or []
        if not posts:
            raise PublishError("CMS response did not contain the created post", payload=response.text)
        return posts[0]
