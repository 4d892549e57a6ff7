from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

from song_catalog.domain.policies import DEFAULT_UPLOAD_POLICY, MAX_UPLOAD_BYTES, UploadPolicy

ENV_PREFIX = "SONG_CATALOG_"


class CatalogConfig(BaseModel):
    upload_dir: Path = Path("uploads")
    snapshot_path: Path = Path("songs.json")
    max_upload_bytes: int = Field(MAX_UPLOAD_BYTES, gt=0)
    upload_timeout_seconds: float = Field(60.0, gt=0.0)
    probe_timeout_seconds: float = Field(30.0, gt=0.0)
    delivery_timeout_seconds: float = Field(5.0, gt=0.0)
    sniff_containers: bool = True
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)

    def upload_policy(self) -> UploadPolicy:
        return UploadPolicy(
            policy_id=DEFAULT_UPLOAD_POLICY.policy_id,
            max_file_size_bytes=self.max_upload_bytes,
            sniff_containers=self.sniff_containers,
            policy_version=DEFAULT_UPLOAD_POLICY.policy_version,
        )


def load_catalog_config(path: Path) -> CatalogConfig:
    data = _load_config_data(path)
    return CatalogConfig.model_validate(data)


@lru_cache(maxsize=1)
def load_catalog_config_from_env() -> CatalogConfig:
    """Build the configuration from ``SONG_CATALOG_*`` environment variables."""

    data = {}
    for field_name in CatalogConfig.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            data[field_name] = value
    return CatalogConfig.model_validate(data)


def _load_config_data(path: Path) -> dict:
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise ImportError("PyYAML is required to load YAML configs.") from exc

        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
