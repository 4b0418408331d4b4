"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:        str = "mdblog"
    db_url:          str = "sqlite:///mdblog.db"
    content_dir:     str = Field(default="blog",  description="Directory holding one folder per post")
    output_dir:      str = Field(default="dist",  description="Directory for rendered JSON + theme CSS")
    base_path:       str = Field(default="",      description="Site origin prefixed to canonical and banner URLs")
    blog_path:       str = Field(default="blog",  description="URL segment cross-post links are rewritten under")
    author:          str = ""
    creator_id:      str = Field(default="",      description="Tracking id for allow-listed docs links; empty disables")
    dark_theme:      str = Field(default="monokai",  description="Pygments style used as the active palette")
    light_theme:     str = Field(default="friendly", description="Pygments style for the light CSS theme")
    icon_path:       str = "/images/languages"
    favicon_service: str = "https://v1.indieweb-avatar.11ty.dev"
    image_format:    str = Field(default="webp", pattern="^(webp|avif|png|jpg)$")
    dev:             bool = Field(default=False, description="Skip version-control lookups for modified dates")
    use_cache:       bool = True
    skip_invalid:    bool = Field(default=False, description="Skip posts with broken front matter instead of failing")
    log_level:       str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDBLOG_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"MDBLOG_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
