"""Configuration management for the Azkaban check.

Connection settings come from the command line. Optional tuning settings can
additionally be supplied by environment variables or a TOML config file.
"""

import logging
import math
import os
import sys
from types import ModuleType
from typing import Any, Dict, Optional
from typing import TypedDict

from check_azkaban.azkaban import DEFAULT_TIMEOUT

# Configure logging
logger = logging.getLogger(__name__)

# Handle tomllib/tomli for Python 3.11+ vs earlier versions
tomllib: Optional[ModuleType]
if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

DEFAULT_SERVICE_NAME = "Azkaban"


class _OptionalValues(TypedDict):
    timeout: float
    max_lookback: Optional[int]
    verify_ssl: bool
    service_name: str


class ConfigError(Exception):
    """Raised when configuration is invalid or missing required values."""

    pass


class Config:
    """Configuration for one check run.

    Optional settings are resolved with the following priority:
    1. Command line flags (highest priority)
    2. Environment variables
    3. Configuration file (TOML format)
    4. Default values (lowest priority)

    Required configuration (command line only):
    - base_url, username, password: Azkaban connection and credentials
    - project, flow: The flow to check

    Optional configuration:
    - timeout: HTTP request timeout in seconds (default: 30)
    - max_lookback: Maximum number of executions to inspect (default: unbounded)
    - verify_ssl: Verify TLS certificates (default: true)
    - service_name: Service name in the status line (default: "Azkaban")
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        project: str,
        flow: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_lookback: Optional[int] = None,
        verify_ssl: bool = True,
        service_name: str = DEFAULT_SERVICE_NAME,
    ):
        """Initialize configuration with validated values.

        Raises:
            ConfigError: If configuration values are invalid
        """
        self.base_url = self._validate_base_url(base_url)
        self.username = username
        self.password = password
        self.project = self._require("project", project)
        self.flow = self._require("flow", flow)
        self.timeout = timeout
        self.max_lookback = max_lookback
        self.verify_ssl = verify_ssl
        self.service_name = service_name

        if not math.isfinite(self.timeout) or self.timeout <= 0:
            logger.error(f"Invalid timeout: {self.timeout}")
            raise ConfigError("Invalid timeout: must be a finite number greater than 0")
        if self.max_lookback is not None and self.max_lookback < 1:
            logger.error(f"Invalid max_lookback: {self.max_lookback}")
            raise ConfigError("Invalid max_lookback: must be at least 1")

    @classmethod
    def from_args(cls, args: Any, config_file: Optional[str] = None) -> "Config":
        """Build configuration from parsed command line arguments.

        Environment variables:
        - AZKABAN_TIMEOUT: HTTP request timeout in seconds
        - AZKABAN_MAX_LOOKBACK: Maximum number of executions to inspect
        - AZKABAN_VERIFY_SSL: Verify TLS certificates ("1", "true", "yes", "on")

        Args:
            args: argparse namespace with base_url, username, password, project,
                  flow and optionally timeout and max_lookback
            config_file: Path to TOML config file (optional)

        Returns:
            Config instance with loaded values

        Raises:
            ConfigError: If configuration is invalid
        """
        values: _OptionalValues = {
            "timeout": DEFAULT_TIMEOUT,
            "max_lookback": None,
            "verify_ssl": True,
            "service_name": DEFAULT_SERVICE_NAME,
        }

        if config_file:
            values.update(cls._load_from_file(config_file))

        if "AZKABAN_TIMEOUT" in os.environ:
            values["timeout"] = cls._parse_number(
                "AZKABAN_TIMEOUT", os.environ["AZKABAN_TIMEOUT"], float
            )
        if "AZKABAN_MAX_LOOKBACK" in os.environ:
            values["max_lookback"] = cls._parse_number(
                "AZKABAN_MAX_LOOKBACK", os.environ["AZKABAN_MAX_LOOKBACK"], int
            )
        if "AZKABAN_VERIFY_SSL" in os.environ:
            values["verify_ssl"] = os.environ["AZKABAN_VERIFY_SSL"].lower() in {
                "1",
                "true",
                "yes",
                "on",
            }

        if getattr(args, "timeout", None) is not None:
            values["timeout"] = args.timeout
        if getattr(args, "max_lookback", None) is not None:
            values["max_lookback"] = args.max_lookback

        config = cls(
            base_url=args.base_url,
            username=args.username,
            password=args.password,
            project=args.project,
            flow=args.flow,
            **values,
        )
        logger.debug(f"Configuration loaded: {config}")
        return config

    @staticmethod
    def _load_from_file(config_file: str) -> Dict[str, Any]:
        """Load optional settings from TOML file.

        Args:
            config_file: Path to TOML config file

        Returns:
            Dictionary with the settings present in the file

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        if tomllib is None:
            raise ConfigError(
                "TOML support not available. Install tomli for Python < 3.11"
            )

        try:
            with open(config_file, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {config_file}")
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to parse config file: {e}")

        config: Dict[str, Any] = {}
        if "timeout" in data:
            config["timeout"] = Config._parse_number("timeout", data["timeout"], float)
        if "max_lookback" in data:
            config["max_lookback"] = Config._parse_number(
                "max_lookback", data["max_lookback"], int
            )
        if "verify_ssl" in data:
            if not isinstance(data["verify_ssl"], bool):
                raise ConfigError(
                    f"Invalid verify_ssl: must be true or false, got {data['verify_ssl']!r}"
                )
            config["verify_ssl"] = data["verify_ssl"]
        if "service_name" in data:
            config["service_name"] = str(data["service_name"])

        return config

    @staticmethod
    def _parse_number(name: str, value: Any, kind: type) -> Any:
        try:
            return kind(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid {name}: must be a number, got {value!r}")

    @staticmethod
    def _validate_base_url(base_url: str) -> str:
        """Validate Azkaban base URL and strip trailing slashes.

        Raises:
            ConfigError: If the URL is not an http(s) URL
        """
        if not base_url.startswith(("http://", "https://")):
            logger.error(f"Invalid base URL (missing protocol): {base_url}")
            raise ConfigError("Base URL must start with http:// or https://")
        return base_url.rstrip("/")

    @staticmethod
    def _require(name: str, value: str) -> str:
        if not value or not value.strip():
            raise ConfigError(f"{name} must not be empty")
        return value

    def __repr__(self) -> str:
        """String representation of configuration with the password masked."""
        return (
            f"Config(base_url={self.base_url!r}, "
            f"username={self.username!r}, "
            f"password='***', "
            f"project={self.project!r}, "
            f"flow={self.flow!r}, "
            f"timeout={self.timeout}, "
            f"max_lookback={self.max_lookback}, "
            f"verify_ssl={self.verify_ssl}, "
            f"service_name={self.service_name!r})"
        )
