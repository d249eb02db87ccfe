"""
Configuration — an explicit struct handed to the resolver and orchestrator.

User settings live in ~/.retouch/config.json. The server default credential
comes from the FAL_KEY environment variable and only its presence is exposed.
"""

import json
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".retouch"
CONFIG_FILE = CONFIG_DIR / "config.json"
DEFAULT_FAL_BASE_URL = "https://fal.run"
SERVER_KEY_ENV = "FAL_KEY"


class RetouchConfig(BaseModel):
    fal_key: str = ""
    backend: str = "kontext-pro"
    server_url: Optional[str] = None
    fal_base_url: str = DEFAULT_FAL_BASE_URL
    data_dir: Path = CONFIG_DIR
    storage: Literal["json", "sqlite"] = "json"
    timeout: float = 120.0


def load_config(path: Path = CONFIG_FILE) -> RetouchConfig:
    try:
        return RetouchConfig.model_validate(json.loads(Path(path).read_text()))
    except FileNotFoundError:
        return RetouchConfig()
    except (json.JSONDecodeError, PydanticValidationError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return RetouchConfig()


def save_config(cfg: RetouchConfig, path: Path = CONFIG_FILE) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg.model_dump(mode="json"), indent=2))


def server_default_credential() -> Optional[str]:
    return os.environ.get(SERVER_KEY_ENV) or None
