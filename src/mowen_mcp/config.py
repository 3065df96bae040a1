"""
Configuration management for mowen-mcp.
Handles loading configuration from the environment and config files.
"""

import os
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict, field
import traceback

import yaml
from dotenv import load_dotenv

from .web import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

SERVER_NAME = "mowen-mcp"

# Environment variable -> config attribute
ENV_VARS = {
    "MOWEN_API_KEY": "api_key",
    "MOWEN_BASE_URL": "base_url",
    "MOWEN_DB_PATH": "db_path",
    "MOWEN_TIMEOUT": "request_timeout",
}

@dataclass
class ServerConfig:
    """MCP server-specific configuration."""
    name: str = SERVER_NAME
    version: str = "1.0.0"

@dataclass
class Config:
    """Configuration settings for mowen-mcp."""

    # Needed by every tool that talks to the API
    api_key: Optional[str] = None
    server: ServerConfig = field(default_factory=ServerConfig)

    # Optional settings with defaults
    base_url: str = DEFAULT_BASE_URL
    db_path: Path = field(default_factory=lambda: Path.home() / ".mowen-mcp" / "mowen.db")
    request_timeout: float = 30.0

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> 'Config':
        """Load configuration from a config file, overridden by the environment."""
        try:
            config_file = cls._get_config_file(config_path)
            if config_file:
                logger.info(f"Loading config from file: {config_file}")
                config_data = cls._load_config_data(config_file)
            else:
                logger.debug("No config file found")
                config_data = {}

            config = cls()
            config._update_from_dict(config_data)
            config._update_from_dict(cls._env_data())

            if not config.api_key:
                logger.warning("MOWEN_API_KEY is not set; only search_note will work")
            return config

        except Exception as e:
            logger.error(
                "Configuration error:\n" +
                ''.join(traceback.format_exception(type(e), e, e.__traceback__))
            )
            raise

    @staticmethod
    def _env_data() -> Dict[str, Any]:
        """Collect settings from environment variables."""
        data = {}
        for env_name, key in ENV_VARS.items():
            value = os.getenv(env_name)
            if value:
                data[key] = value.strip().strip('"')
        return data

    @staticmethod
    def _get_config_file(config_path: Optional[str]) -> Optional[Path]:
        """Get configuration file path."""
        default_locations = [
            Path.cwd() / "mowen-mcp.json",
            Path.cwd() / "mowen-mcp.yaml",
            Path.home() / ".config" / "mowen-mcp" / "config.json",
            Path.home() / ".config" / "mowen-mcp" / "config.yaml",
            Path.home() / "Library/Application Support/Claude/claude_desktop_config.json",
            Path.home() / "AppData/Roaming/Claude/claude_desktop_config.json"
        ]

        if config_path:
            return Path(config_path)

        for loc in default_locations:
            if loc.exists():
                logger.debug(f"Checking config location: {loc}")
                return loc
        return None

    @staticmethod
    def _load_config_data(config_file: Path) -> Dict[str, Any]:
        """Load configuration data from a JSON or YAML file."""
        config_data: Dict[str, Any] = {}

        try:
            with open(config_file, encoding="utf-8") as f:
                if config_file.suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Error loading config file {config_file}: {e}")
            return config_data

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {config_file}: not a mapping")
            return config_data

        # Handle Claude Desktop config structure
        servers = data.get('mcpServers', {})
        if SERVER_NAME in servers:
            server_config = servers[SERVER_NAME]
            logger.info("Found Claude Desktop server config")
            env = server_config.get('env', {})
            for env_name, key in ENV_VARS.items():
                if env.get(env_name):
                    config_data[key] = env[env_name]
        elif 'mcpServers' not in data:
            config_data = data

        logger.info(f"Loaded config from {config_file}")
        return config_data

    def _update_from_dict(self, config_data: Dict[str, Any]) -> None:
        """Update config from dictionary data."""
        for key, value in config_data.items():
            if key == 'server' and isinstance(value, dict):
                self.server = ServerConfig(**value)
            elif hasattr(self, key):
                if key.endswith('_path') and isinstance(value, str):
                    value = Path(value).expanduser()
                elif key == 'request_timeout':
                    value = float(value)
                setattr(self, key, value)
                if key != 'api_key':
                    logger.debug(f"Updated config {key}: {value}")

    def require_api_key(self) -> str:
        """Return the API key, or raise if it is not configured."""
        if not self.api_key:
            raise ValueError(
                "API key must be provided in the MOWEN_API_KEY environment variable or config file"
            )
        return self.api_key

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary, without the API key."""
        config_dict = asdict(self)
        config_dict['db_path'] = str(config_dict['db_path'])
        config_dict.pop('api_key')
        return config_dict

    def __str__(self) -> str:
        """String representation of config."""
        return f"Config(base_url={self.base_url}, db_path={self.db_path})"
