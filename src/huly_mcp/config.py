"""Configuration for the Huly MCP server.

Settings come from environment variables, optionally backed by a
``.hulyrc.json`` or ``.hulyrc.yaml`` file in the working directory.
Environment variables always win over the file.

Huly connection:
- HULY_URL: Huly server URL (http or https)
- HULY_TOKEN: pre-issued workspace token
- HULY_WORKSPACE: workspace id
- HULY_CONNECTION_TIMEOUT: request timeout in milliseconds (default 30000)

Server:
- MCP_TRANSPORT: ``stdio`` (default) or ``http``
- MCP_HTTP_PORT / MCP_HTTP_HOST: HTTP bind address (default 127.0.0.1:3000)
- MCP_AUTO_EXIT: exit the process once shutdown completes
- TOOLSETS: comma separated tool categories to expose
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_FILE_NAMES = (".hulyrc.json", ".hulyrc.yaml", ".hulyrc.yml")
DEFAULT_CONNECTION_TIMEOUT_MS = 30000
DEFAULT_HTTP_PORT = 3000
DEFAULT_HTTP_HOST = "127.0.0.1"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigValidationError(Exception):
    """Raised when a configuration value is missing or invalid."""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class ConfigFileError(Exception):
    """Raised when the config file exists but cannot be read or parsed."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class HulyConfig(BaseModel):
    """Validated Huly connection settings."""

    url: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    workspace: str = Field(..., min_length=1)
    connection_timeout_ms: int = Field(DEFAULT_CONNECTION_TIMEOUT_MS, gt=0)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be a valid http or https URL")
        return value.rstrip("/")

    @property
    def timeout_seconds(self) -> float:
        return self.connection_timeout_ms / 1000


# Maps model fields to their environment variable names
ENV_FIELDS = {
    "url": "HULY_URL",
    "token": "HULY_TOKEN",
    "workspace": "HULY_WORKSPACE",
    "connection_timeout_ms": "HULY_CONNECTION_TIMEOUT",
}

# Maps config file keys to model fields
FILE_FIELDS = {
    "url": "url",
    "workspace": "workspace",
    "connectionTimeout": "connection_timeout_ms",
}


@dataclass
class McpServerConfig:
    transport: Literal["stdio", "http"] = "stdio"
    http_port: int = DEFAULT_HTTP_PORT
    http_host: str = DEFAULT_HTTP_HOST
    auto_exit: bool = False


def find_config_file(directory: Path) -> Optional[Path]:
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(f"Failed to read config file {path}: {e}", path) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"Config file {path} must contain an object", path)
    return {FILE_FIELDS[k]: v for k, v in data.items() if k in FILE_FIELDS}


def load_huly_config(
    env: Optional[Mapping[str, str]] = None,
    directory: Optional[Path] = None,
) -> HulyConfig:
    env = os.environ if env is None else env
    directory = Path.cwd() if directory is None else directory

    values: dict = {}
    config_file = find_config_file(directory)
    if config_file is not None:
        values.update(load_config_file(config_file))

    for field_name, env_name in ENV_FIELDS.items():
        raw = env.get(env_name)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    try:
        return HulyConfig.model_validate(values)
    except ValidationError as e:
        first = e.errors()[0]
        field_name = str(first["loc"][0]) if first["loc"] else "config"
        env_name = ENV_FIELDS.get(field_name, field_name)
        if first["type"] == "missing":
            message = f"{env_name} is required"
        else:
            message = f"{env_name} {first['msg']}"
        raise ConfigValidationError(message, env_name) from e


def _parse_port(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        return DEFAULT_HTTP_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ConfigValidationError(f"MCP_HTTP_PORT must be an integer, got '{raw}'", "MCP_HTTP_PORT") from None
    if not 0 < port < 65536:
        raise ConfigValidationError(f"MCP_HTTP_PORT must be between 1 and 65535, got {port}", "MCP_HTTP_PORT")
    return port


def load_server_config(env: Optional[Mapping[str, str]] = None, auto_exit_default: bool = False) -> McpServerConfig:
    env = os.environ if env is None else env
    transport = (env.get("MCP_TRANSPORT") or "stdio").strip().lower()
    if transport not in ("stdio", "http"):
        raise ConfigValidationError(
            f"MCP_TRANSPORT must be 'stdio' or 'http', got '{transport}'",
            "MCP_TRANSPORT",
        )
    auto_exit_raw = env.get("MCP_AUTO_EXIT")
    auto_exit = auto_exit_default if auto_exit_raw is None else auto_exit_raw.strip().lower() in _TRUTHY
    return McpServerConfig(
        transport=transport,
        http_port=_parse_port(env.get("MCP_HTTP_PORT")),
        http_host=(env.get("MCP_HTTP_HOST") or DEFAULT_HTTP_HOST).strip(),
        auto_exit=auto_exit,
    )
