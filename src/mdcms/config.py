"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from mdcms.core.headings import MAX_LEVEL


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:         str = "mdcms"
    db_url:           str = "sqlite:///mdcms.db"
    content_dir:      str = Field(default="content", description="Root directory of .md/.mdx documents")
    output_dir:       str = Field(default="dist",    description="Directory for exported MDX files")
    max_depth:        int = Field(default=MAX_LEVEL, ge=1, le=MAX_LEVEL, description="Deepest heading level kept in a TOC")
    words_per_minute: int = Field(default=200, ge=1, description="Reading speed used for read-time estimates")
    parser_config:    str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    log_level:        str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDCMS_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"MDCMS_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
