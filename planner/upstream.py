"""
HTTP clients for the pass-through tools: GitHub profile lookup and image
generation on Cloudflare Workers AI.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .config import UpstreamConfig
from .errors import UpstreamError

logger = logging.getLogger(__name__)


class UpstreamClient:
    def __init__(self, config: UpstreamConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            resp = self.session.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as e:
            raise UpstreamError(f"{method} {url} failed: {e}") from e
        if resp.status_code >= 400:
            raise UpstreamError(f"{method} {url} returned {resp.status_code}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"{method} {url} returned a non-JSON body") from e

    def github_user(self, access_token: str) -> dict:
        """Return the authenticated user's GitHub profile."""
        url = self.config.github_api_url.rstrip("/") + "/user"
        return self._request(
            "GET",
            url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
            },
        )

    def generate_image(self, prompt: str, steps: int) -> str:
        """Run the text-to-image model and return the base64-encoded JPEG."""
        if not self.config.cloudflare_account_id or not self.config.cloudflare_api_token:
            raise UpstreamError("Image generation is not configured")
        url = (
            "https://api.cloudflare.com/client/v4/accounts/"
            f"{self.config.cloudflare_account_id}/ai/run/{self.config.image_model}"
        )
        logger.info("Generating image with %s (%d steps)", self.config.image_model, steps)
        body = self._request(
            "POST",
            url,
            headers={"Authorization": f"Bearer {self.config.cloudflare_api_token}"},
            json={"prompt": prompt, "steps": steps},
        )
        image = (body.get("result") or {}).get("image") if isinstance(body, dict) else None
        if not image:
            raise UpstreamError("Image model returned no image")
        return image
