"""Sync service configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class SyncSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///notion_sync.db"
    echo_sql: bool = False
    app_title: str = "Notion Sync"
    log_level: str = "INFO"

    # Source workspace (Notion REST API)
    notion_api_key: str = ""
    notion_api_base: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    notion_timeout_seconds: float = 30.0

    # Full-pass walking
    sync_page_size: int = 100
    sync_max_pages: int = 1000
    sync_max_concurrency: int = 20

    # Asset mirroring (images re-hosted into the object store)
    asset_mirror_enabled: bool = True
    asset_user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    asset_timeout_seconds: float = 30.0
    asset_blobstore_dir: str = "data/objects"
    asset_public_base_url: str = "http://localhost:8030/objects"

    # Inbound change notifications
    webhook_secret: str | None = None
    webhook_narrow_updates: bool = True
    security_fail_closed: bool = False

    # Tenant identity arrives already resolved by the auth layer in front of us.
    tenant_header: str = "X-Tenant-Id"
    tenant_token_header: str = "X-Tenant-Token"
    tenant_access_tokens: str = ""
    tenant_auth_required: bool = False

    model_config = {"env_prefix": "NOTION_SYNC_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def blobstore_dir(self) -> Path:
        path = Path(self.asset_blobstore_dir)
        if not path.is_absolute():
            path = self.project_dir / path
        return path

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}

    @property
    def tenant_access_tokens_map(self) -> dict[str, str]:
        """Parse comma-separated tenant:token pairs."""
        mapping: dict[str, str] = {}
        if not self.tenant_access_tokens.strip():
            return mapping

        for item in self.tenant_access_tokens.split(","):
            pair = item.strip()
            if not pair or ":" not in pair:
                continue
            tenant_id, token = pair.split(":", 1)
            tenant_id = tenant_id.strip()
            token = token.strip()
            if tenant_id and token:
                mapping[tenant_id] = token
        return mapping


settings = SyncSettings()
