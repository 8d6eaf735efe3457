from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG_FILE = "pagepack.toml"
DEFAULT_OUT_DIR = "out"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080


@dataclass
class AppConfig:
    src_dir: Path
    dst_dir: Path
    minify: bool = False
    watch: bool = False
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigurationError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must be a mapping: {path}")
    return data


def validate_config(config: AppConfig) -> AppConfig:
    if not config.src_dir.is_dir():
        raise ConfigurationError(f"Project directory not found: {config.src_dir}")
    if config.dst_dir == config.src_dir or config.src_dir.is_relative_to(config.dst_dir):
        raise ConfigurationError(f"Output directory must not contain the project directory: {config.dst_dir}")
    if not 0 < config.port < 65536:
        raise ConfigurationError(f"Invalid port: {config.port}")
    return config
