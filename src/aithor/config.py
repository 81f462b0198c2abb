"""Application settings, read from the environment and an optional .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "https://ebookapi-1xjq.onrender.com/api/v1"


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class AppConfig:
    # Paths
    data_dir: Path = field(default_factory=lambda: _xdg_data_home() / "aithor")
    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "aithor")
    db_path: Path = field(init=False)
    session_path: Path = field(init=False)
    log_path: Path = field(init=False)

    # Remote API
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 30.0
    library_page_size: int = 100

    # Demo translation
    translate_target_lang: str = "es"

    def __post_init__(self) -> None:
        self.db_path = self.data_dir / "aithor.db"
        self.log_path = self.data_dir / "aithor.log"
        self.session_path = self.config_dir / "session.env"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)


def load_config(env_path: Optional[Path] = None) -> AppConfig:
    """Build an AppConfig from AITHOR_* variables, filling gaps from the first .env found."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "aithor" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    defaults = AppConfig()
    return AppConfig(
        api_base_url=os.getenv("AITHOR_API_BASE_URL", defaults.api_base_url).rstrip(
            "/"
        ),
        request_timeout=float(
            os.getenv("AITHOR_REQUEST_TIMEOUT", defaults.request_timeout)
        ),
        library_page_size=int(
            os.getenv("AITHOR_LIBRARY_PAGE_SIZE", defaults.library_page_size)
        ),
        translate_target_lang=os.getenv(
            "AITHOR_TRANSLATE_TARGET_LANG", defaults.translate_target_lang
        ),
    )
