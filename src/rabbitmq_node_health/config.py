"""Configuration management for the RabbitMQ node health check."""

import configparser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """Raised when the check configuration cannot be loaded."""


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _number(data: dict[str, Any], key: str, default: float, kind: type = float) -> Any:
    value = data.get(key, default)
    # YAML booleans would otherwise coerce to 1/0
    if isinstance(value, bool):
        raise ConfigError(f"Option '{key}' must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Option '{key}' must be a number, got {value!r}") from e


def _flag(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"Option '{key}' must be true or false, got {value!r}")
    return value


def _text(data: dict[str, Any], key: str, default: str | None) -> str | None:
    value = data.get(key, default)
    if value is None and default is None:
        return None
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise ConfigError(f"Option '{key}' must be a string, got {value!r}")
    return str(value)


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Section '{key}' must be a mapping, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Thresholds:
    """Alert thresholds, as percentages of the node's limits."""
    
    memory_warning: float = 80.0
    memory_critical: float = 90.0
    socket_warning: float = 80.0
    socket_critical: float = 90.0
    fd_warning: float = 80.0
    fd_critical: float = 90.0
    watch_alarms: bool = True
    # File descriptor bounds are inert unless this is set
    check_file_descriptors: bool = False
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "memory_warning": self.memory_warning,
            "memory_critical": self.memory_critical,
            "socket_warning": self.socket_warning,
            "socket_critical": self.socket_critical,
            "fd_warning": self.fd_warning,
            "fd_critical": self.fd_critical,
            "watch_alarms": self.watch_alarms,
            "check_file_descriptors": self.check_file_descriptors,
        }
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Thresholds":
        """Create from dictionary."""
        return cls(
            memory_warning=_number(data, "memory_warning", 80.0),
            memory_critical=_number(data, "memory_critical", 90.0),
            socket_warning=_number(data, "socket_warning", 80.0),
            socket_critical=_number(data, "socket_critical", 90.0),
            fd_warning=_number(data, "fd_warning", 80.0),
            fd_critical=_number(data, "fd_critical", 90.0),
            watch_alarms=_flag(data, "watch_alarms", True),
            check_file_descriptors=_flag(data, "check_file_descriptors", False),
        )


@dataclass(frozen=True)
class ConnectionConfig:
    """Management API connection settings."""
    
    host: str = "localhost"
    port: int = 15672
    username: str = "guest"
    password: str = "guest"
    ssl: bool = False
    verify_ssl_off: bool = False
    timeout: float = 10.0
    node_name: str | None = None  # Defaults to rabbit@<host>
    
    @property
    def base_url(self) -> str:
        scheme = "https" if self.ssl else "http"
        return f"{scheme}://{self.host}:{self.port}"
    
    @property
    def node(self) -> str:
        return self.node_name or f"rabbit@{self.host}"
    
    @property
    def node_url(self) -> str:
        """Full URL of the node's management API record."""
        return f"{self.base_url}/api/nodes/{self.node}"
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConnectionConfig":
        return cls(
            host=_text(data, "host", "localhost"),
            port=_number(data, "port", 15672, kind=int),
            username=_text(data, "username", "guest"),
            password=_text(data, "password", "guest"),
            ssl=_flag(data, "ssl", False),
            verify_ssl_off=_flag(data, "verify_ssl_off", False),
            timeout=_number(data, "timeout", 10.0),
            node_name=_text(data, "node_name", None),
        )


def load_ini_credentials(path: str | Path) -> tuple[str, str]:
    """Read ``username`` and ``password`` from the ``[auth]`` section of an ini file.
    
    Args:
        path: Path to the ini file.
    
    Returns:
        Tuple of (username, password).
    
    Raises:
        ConfigError: If the file, the section or a key is missing.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Credentials file not found: {path}")
    
    parser = configparser.ConfigParser()
    try:
        parser.read(path)
    except configparser.Error as e:
        raise ConfigError(f"Invalid credentials file {path}: {e}") from e
    
    if not parser.has_section("auth"):
        raise ConfigError(f"No [auth] section in credentials file: {path}")
    
    section = parser["auth"]
    try:
        return section["username"], section["password"]
    except KeyError as e:
        raise ConfigError(f"Missing {e} in [auth] section of {path}") from e


@dataclass
class Config:
    """Main configuration for the health check."""
    
    connection: ConnectionConfig = field(default_factory=ConnectionConfig)
    thresholds: Thresholds = field(default_factory=Thresholds)
    log_level: str = "WARNING"
    
    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        
        return cls.from_dict(data or {})
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create configuration from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")
        
        connection_data = dict(_section(data, "connection"))
        
        # Credentials from an ini file take precedence over inline ones
        ini_path = connection_data.pop("ini", None)
        if ini_path:
            username, password = load_ini_credentials(ini_path)
            connection_data.update(username=username, password=password)
        
        log_level = str(data.get("log_level", "WARNING")).upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level: {data['log_level']!r}")
        
        return cls(
            connection=ConnectionConfig.from_dict(connection_data),
            thresholds=Thresholds.from_dict(_section(data, "thresholds")),
            log_level=log_level,
        )
    
    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        
        with open(path, "w") as f:
            yaml.dump(self._to_dict(), f, default_flow_style=False, sort_keys=False)
    
    def _to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        conn = self.connection
        connection: dict[str, Any] = {
            "host": conn.host,
            "port": conn.port,
            "username": conn.username,
            "password": conn.password,
            "ssl": conn.ssl,
            "verify_ssl_off": conn.verify_ssl_off,
            "timeout": conn.timeout,
        }
        if conn.node_name:
            connection["node_name"] = conn.node_name
        
        return {
            "connection": connection,
            "thresholds": self.thresholds.to_dict(),
            "log_level": self.log_level,
        }


def create_example_config() -> Config:
    """Create an example configuration for documentation."""
    return Config(
        connection=ConnectionConfig(
            host="rabbit-1.example.com",
            port=15671,
            username="monitoring",
            password="changeme",
            ssl=True,
        ),
        thresholds=Thresholds(
            memory_warning=80.0,
            memory_critical=90.0,
            socket_warning=80.0,
            socket_critical=90.0,
            fd_warning=80.0,
            fd_critical=90.0,
            watch_alarms=True,
        ),
    )
