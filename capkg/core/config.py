# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
capkg Configuration - Single source of truth.
YAML is king. Env vars only select the file and override the log level.

- ALL configuration in plain text (YAML)
- NO hidden state - the journal, lock files and descriptor are plain files
- Validated with Pydantic schemas
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from capkg.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "/etc/capkg/capkg.yaml"
DEFAULT_STATE_DIR = "/var/lib/capkg"


def _reject_unsafe_path(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if any(char in v for char in [';', '&', '|', '$', '`', '\n', '\r']):
        raise ValueError("Invalid characters in path")
    if '..' in Path(v).parts:
        raise ValueError("Path traversal not allowed")
    return v


class PathsConfig(BaseModel):
    """File locations. Unset entries are derived from state_dir."""
    model_config = ConfigDict(frozen=True)

    state_dir: str = Field(default=DEFAULT_STATE_DIR, description="Base state directory")
    journal: Optional[str] = Field(default=None, description="Transaction journal file")
    lock_dir: Optional[str] = Field(default=None, description="Directory for lock files")
    descriptor: Optional[str] = Field(default=None, description="Dependency descriptor file")
    installed: Optional[str] = Field(default=None, description="Installed packages record (JSON)")

    @field_validator('state_dir', 'journal', 'lock_dir', 'descriptor', 'installed')
    @classmethod
    def validate_path(cls, v):
        return _reject_unsafe_path(v)


class TransactionsConfig(BaseModel):
    """Transaction and locking behaviour"""
    model_config = ConfigDict(frozen=True)

    lock_name: str = Field(default="install", description="Name of the exclusive install lock")
    reset_journal_on_start: bool = Field(
        default=False,
        description="Truncate the journal at the start of every run"
    )
    blocking_lock: bool = Field(default=False, description="Wait for the lock instead of failing")

    @field_validator('lock_name')
    @classmethod
    def validate_lock_name(cls, v):
        if not v or '/' in v or '\\' in v or v.startswith('.'):
            raise ValueError("Lock name must be a plain file name")
        return v


class LoggingConfig(BaseModel):
    """Logging Configuration"""
    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format (json/text)")
    file: Optional[str] = Field(default=None, description="Optional log file")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        v = v.upper()
        if v not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            raise ValueError("Level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return v

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        if v not in ['json', 'text']:
            raise ValueError("Format must be 'json' or 'text'")
        return v


class Config(BaseModel):
    """
    Immutable package manager configuration.
    All values from YAML. No hidden state.
    """
    model_config = ConfigDict(frozen=True)

    paths: PathsConfig = Field(default_factory=PathsConfig)
    transactions: TransactionsConfig = Field(default_factory=TransactionsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # -- Derived paths --
    @property
    def state_dir(self) -> Path:
        return Path(self.paths.state_dir)

    @property
    def journal_path(self) -> Path:
        if self.paths.journal:
            return Path(self.paths.journal)
        return self.state_dir / "transaction.log"

    @property
    def lock_dir(self) -> Path:
        if self.paths.lock_dir:
            return Path(self.paths.lock_dir)
        return self.state_dir / "locks"

    @property
    def descriptor_path(self) -> Path:
        if self.paths.descriptor:
            return Path(self.paths.descriptor)
        return self.state_dir / "dependencies.txt"

    @property
    def installed_path(self) -> Path:
        if self.paths.installed:
            return Path(self.paths.installed)
        return self.state_dir / "installed-packages.json"


# =============================================================================
# LOADER
# =============================================================================

def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load configuration from YAML.
    Returns defaults if file doesn't exist.

    Args:
        path: YAML configuration file

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    if not Path(path).exists():
        logger.warning(f"Config not found at {path}, using defaults")
        raw: Dict[str, Any] = {}
    else:
        try:
            with open(path, 'r') as f:
                # Use safe_load to prevent YAML code execution
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_file=path)

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config root must be a mapping: {path}", config_file=path)

    # Env override for the log level only
    env_level = os.getenv("CAPKG_LOG_LEVEL")
    if env_level:
        raw = {**raw, "logging": {**(raw.get("logging") or {}), "level": env_level}}

    try:
        return Config(**raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {path}",
            config_file=path,
            details={"errors": [err["msg"] for err in e.errors()]}
        )


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("CAPKG_CONFIG_PATH", DEFAULT_CONFIG_PATH)
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
