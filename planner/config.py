"""Configuration loading from environment variables and planner.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_STORE_PATH = Path.home() / ".planner" / "store.json"
_CONFIG_FILENAME = "planner.toml"


@dataclass
class StoreConfig:
    """Key-value store selection."""

    backend: str = "memory"
    path: Path = _DEFAULT_STORE_PATH
    cas_retries: int = 5


@dataclass
class AccessConfig:
    """Who may see the privileged tools."""

    allowed_logins: frozenset[str] = frozenset()
    internal_token: str = ""


@dataclass
class UpstreamConfig:
    """External services behind the pass-through tools."""

    github_api_url: str = "https://api.github.com"
    cloudflare_account_id: str = ""
    cloudflare_api_token: str = ""
    image_model: str = "@cf/black-forest-labs/flux-1-schnell"
    timeout: int = 60


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8787


@dataclass
class PlannerConfig:
    """Top-level configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    access: AccessConfig = field(default_factory=AccessConfig)
    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"


def _split_logins(value: str | list[str]) -> frozenset[str]:
    if isinstance(value, str):
        value = value.split(",")
    return frozenset(v.strip() for v in value if v.strip())


def load_config(config_path: Path | None = None) -> PlannerConfig:
    """Load configuration from environment variables and optional planner.toml.

    Priority: environment variables > planner.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".planner" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    store_data = file_data.get("store", {})
    access_data = file_data.get("access", {})
    upstream_data = file_data.get("upstream", {})
    server_data = file_data.get("server", {})

    return PlannerConfig(
        store=StoreConfig(
            backend=os.getenv("PLANNER_STORE_BACKEND", store_data.get("backend", "memory")),
            path=Path(os.getenv("PLANNER_STORE_PATH", store_data.get("path", str(_DEFAULT_STORE_PATH)))),
            cas_retries=int(os.getenv("PLANNER_CAS_RETRIES", store_data.get("cas_retries", 5))),
        ),
        access=AccessConfig(
            allowed_logins=_split_logins(
                os.getenv("PLANNER_ALLOWED_LOGINS", access_data.get("allowed_logins", []))
            ),
            internal_token=os.getenv("PLANNER_INTERNAL_TOKEN", access_data.get("internal_token", "")),
        ),
        upstream=UpstreamConfig(
            github_api_url=os.getenv(
                "GITHUB_API_URL", upstream_data.get("github_api_url", "https://api.github.com")
            ),
            cloudflare_account_id=os.getenv(
                "CLOUDFLARE_ACCOUNT_ID", upstream_data.get("cloudflare_account_id", "")
            ),
            cloudflare_api_token=os.getenv(
                "CLOUDFLARE_API_TOKEN", upstream_data.get("cloudflare_api_token", "")
            ),
            image_model=os.getenv(
                "PLANNER_IMAGE_MODEL",
                upstream_data.get("image_model", "@cf/black-forest-labs/flux-1-schnell"),
            ),
            timeout=int(os.getenv("PLANNER_UPSTREAM_TIMEOUT", upstream_data.get("timeout", 60))),
        ),
        server=ServerConfig(
            host=os.getenv("PLANNER_HOST", server_data.get("host", "127.0.0.1")),
            port=int(os.getenv("PLANNER_PORT", server_data.get("port", 8787))),
        ),
        log_level=os.getenv("PLANNER_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
