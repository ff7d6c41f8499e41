# pure_disk/config/models.py

import os
from pathlib import Path
from typing import Optional

import tomlkit
from tomlkit.exceptions import ParseError
from pydantic import BaseModel, Field, field_validator

from pure_disk.sizes import parse_size
from pure_disk.utils.exceptions import InvalidSizeFormat

CONFIG_ENV_VAR = "PURE_DISK_CONFIG"
DEFAULT_CONFIG_FILE = "pure-disk.toml"


class PureDiskConfig(BaseModel):
    """Settings shared by the partition and mount tools (pure-disk.toml)."""

    log_directory: str = Field("logs", min_length=1)
    mount_root: str = Field("/mnt/gentoo")
    efi_default_size: str = Field("512M")
    swap_default_size: str = Field("8G")

    @field_validator("mount_root")
    @classmethod
    def _absolute_mount_root(cls, value: str) -> str:
        if not value.startswith("/") or value.rstrip("/") == "":
            raise ValueError(f"mount_root must be an absolute directory other than '/', got '{value}'")
        return value.rstrip("/")

    @field_validator("efi_default_size", "swap_default_size")
    @classmethod
    def _fixed_size(cls, value: str) -> str:
        try:
            parse_size(value)
        except InvalidSizeFormat as e:
            raise ValueError(str(e))
        return value.strip()

    @classmethod
    def load_config_from_file(cls, path: Path) -> 'PureDiskConfig':
        """Loads and validates a TOML file against the schema."""
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ValueError(f"Error reading configuration file: {e}")

        try:
            data = tomlkit.parse(content).unwrap()
        except ParseError as e:
            raise ValueError(f"Invalid TOML format in file: {e}")

        return cls(**data)


def load_config(path: Optional[Path] = None) -> PureDiskConfig:
    """
    Resolves the configuration: an explicit path, then $PURE_DISK_CONFIG, then
    ./pure-disk.toml. Defaults apply when none of them exists.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
        elif Path(DEFAULT_CONFIG_FILE).is_file():
            path = Path(DEFAULT_CONFIG_FILE)

    if path is None:
        return PureDiskConfig()
    return PureDiskConfig.load_config_from_file(path)
