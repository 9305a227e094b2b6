# AWB Stock - Application Context (Singleton)
# ===========================================

import logging
import logging.config
import shutil
import sys
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_DB_NAME,
    DEFAULT_LOG_NAME,
    DEFAULT_MAX_BATCH_SIZE,
)
from .exceptions import ConfigurationError


class AppContext:
    """
    Singleton class holding global application state.

    Provides access to:
    - Configuration (settings.yaml)
    - Logger
    - Base paths (resources_dir and user_dir)

    Bundled configs live in the package 'config/' directory. A copy is placed
    in '<user_dir>/config/' on first start so operators can override values;
    the user copy is deep-merged over the bundled defaults.
    """

    _instance: "AppContext | None" = None
    _initialized: bool = False

    def __new__(cls) -> "AppContext":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        # Only initialize once
        if AppContext._initialized:
            return
        AppContext._initialized = True

        self._config: dict[str, Any] = {}
        self._logger: logging.Logger | None = None
        self._user_dir: Path | None = None

    def initialize(self, user_dir: Path | str | None = None, debug: bool = False) -> None:
        """
        Initialize the application context.

        Args:
            user_dir: Writable directory for database, logs and config overlays.
                Defaults to './data'.
            debug: Force DEBUG level on all loggers and handlers.
        """
        if user_dir is None:
            user_dir = Path.cwd() / DEFAULT_DATA_DIR
        self._user_dir = Path(user_dir).resolve()
        logging.info(f"User data directory: {self._user_dir}")

        try:
            self._user_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create data directory: {e}",
                config_file=str(self._user_dir),
            ) from e

        self._copy_bundled_configs_to_user_dir()

        self._load_config()
        self._setup_logging(debug=debug)

        self._logger.info(
            f"AppContext initialized. Data directory: {self._user_dir}"
        )

    @property
    def resources_dir(self) -> Path:
        """Directory containing read-only bundled resources (config, migrations)."""
        return Path(__file__).parent.parent.resolve()

    @property
    def user_dir(self) -> Path:
        """Writable directory for user data."""
        if self._user_dir is None:
            raise ConfigurationError("AppContext not initialized")
        return self._user_dir

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Error parsing configuration file: {e}",
                config_file=str(path),
            ) from e

    def _load_layered(self, file_name: str) -> dict[str, Any]:
        """Load a bundled config file with the user overlay merged on top."""
        user_path = self.user_dir / "config" / file_name
        bundled_path = self.resources_dir / "config" / file_name

        if not bundled_path.exists() and not user_path.exists():
            raise ConfigurationError(
                "Configuration file not found in bundled or user config paths",
                config_file=str(bundled_path),
            )

        bundled: dict[str, Any] = {}
        user: dict[str, Any] = {}

        if bundled_path.exists():
            bundled = self._load_yaml(bundled_path)
            logging.info(f"Loaded bundled config base: {bundled_path}")
        else:
            logging.warning(f"Bundled config not found: {bundled_path}")

        if user_path.exists():
            user = self._load_yaml(user_path)
            logging.info(f"Loaded user config overlay: {user_path}")

        if bundled:
            return self._deep_merge_with_validation(bundled, user)
        return user

    def _load_config(self) -> None:
        """Load main configuration from bundled settings with user overlay."""
        self._config = self._load_layered("settings.yaml")

    def _deep_merge_with_validation(
        self, base: dict, override: dict
    ) -> dict:
        """
        Deep merge override into base with validation.

        - Nested dicts: merged recursively
        - Lists: replaced entirely
        - Primitives: replaced with override value
        - Unknown keys: allowed (logged as warning)
        - Type mismatch: use base value (logged as warning)
        """
        result = base.copy()

        for key, override_value in override.items():
            if key not in base:
                logging.warning(f"Config override: unknown key '{key}'")
                result[key] = override_value
            elif isinstance(base[key], dict) and isinstance(override_value, dict):
                result[key] = self._deep_merge_with_validation(
                    base[key], override_value
                )
            elif type(base[key]) != type(override_value) and base[key] is not None:
                logging.warning(
                    f"Config override: type mismatch for '{key}', "
                    f"expected {type(base[key]).__name__}, "
                    f"got {type(override_value).__name__}. Using base value."
                )
            else:
                result[key] = override_value

        return result

    def _setup_logging(self, debug: bool = False) -> None:
        """Setup logging from bundled config with user overlay or use default config."""
        logs_dir = self.get_path("logs_dir")
        logs_dir.mkdir(parents=True, exist_ok=True)

        try:
            log_config = self._load_layered("logging.yaml")

            # Route log files to the logs directory
            for handler_config in log_config.get("handlers", {}).values():
                if "filename" in handler_config:
                    rel_path = Path(handler_config["filename"]).name
                    handler_config["filename"] = str(logs_dir / rel_path)

            if debug:
                log_config.setdefault("root", {})["level"] = "DEBUG"
                for handler_config in log_config.get("handlers", {}).values():
                    handler_config["level"] = "DEBUG"
                for logger_config in log_config.get("loggers", {}).values():
                    logger_config["level"] = "DEBUG"

            logging.config.dictConfig(log_config)
        except (ConfigurationError, ValueError, TypeError, AttributeError, OSError) as e:
            self._setup_basic_logging(debug)
            logging.warning(f"Could not load logging config: {e}")

        self._logger = logging.getLogger("awbstock")

    def _setup_basic_logging(self, debug: bool = False) -> None:
        """Setup basic logging when config file is not available."""
        log_file = self.get_path("logs_dir") / DEFAULT_LOG_NAME

        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[
                logging.StreamHandler(sys.stderr),
                logging.FileHandler(log_file, encoding="utf-8"),
            ],
        )

    def _copy_bundled_configs_to_user_dir(self) -> None:
        """
        Copy bundled config files to user_dir/config/ if they don't exist.

        Bundled configs in resources_dir remain as read-only defaults.
        """
        user_config_dir = self.user_dir / "config"
        user_config_dir.mkdir(parents=True, exist_ok=True)

        for config_file in ("settings.yaml", "logging.yaml"):
            bundled_path = self.resources_dir / "config" / config_file
            user_path = user_config_dir / config_file

            if user_path.exists():
                logging.debug(f"User config exists: {user_path}")
                continue

            if bundled_path.exists():
                try:
                    shutil.copy2(bundled_path, user_path)
                    logging.info(f"Copied bundled config to user dir: {config_file}")
                except OSError as e:
                    logging.warning(
                        f"Failed to copy {config_file} to user dir: {e}. "
                        "Will use bundled version."
                    )
            else:
                logging.warning(f"Bundled config not found: {bundled_path}")

    @property
    def config(self) -> dict[str, Any]:
        """Get the main configuration dictionary."""
        return self._config

    def get_path(self, key: str) -> Path:
        """
        Get a path from configuration, resolved against user_dir.

        Args:
            key: Path key from settings.yaml (e.g., 'database', 'logs_dir')

        Returns:
            Absolute path
        """
        paths_config = self._config.get("paths", {})

        if key in paths_config:
            rel_path = paths_config[key]
        else:
            defaults = {
                "database": DEFAULT_DB_NAME,
                "logs_dir": "logs",
            }
            rel_path = defaults.get(key, key)

        if not rel_path:
            return self.user_dir

        path = Path(rel_path)
        if path.is_absolute():
            return path
        return self.user_dir / path

    def get_migrations_path(self) -> Path:
        """Directory holding bundled SQL migrations."""
        return self.resources_dir / "data" / "migrations"

    def get_awb_config(self) -> dict[str, Any]:
        """Get AWB series configuration."""
        return self._config.get("awb", {})

    @property
    def max_batch_size(self) -> int:
        """Maximum number of AWB numbers one series may produce."""
        value = self.get_awb_config().get("max_batch_size", DEFAULT_MAX_BATCH_SIZE)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ConfigurationError(
                f"Invalid max_batch_size: {value!r}",
                config_file="settings.yaml",
                key="awb.max_batch_size",
            )
        return value

    @property
    def supported_prefixes(self) -> list[str]:
        """Prefixes allowed by configuration, as 3-digit strings."""
        prefixes = self.get_awb_config().get("supported_prefixes") or []
        return [str(p) for p in prefixes]

    @property
    def airlines(self) -> list[dict[str, Any]]:
        """Airline definitions used to seed the airlines table."""
        return list(self.get_awb_config().get("airlines") or [])


# Global convenience function
def get_context() -> AppContext:
    """Get the global AppContext instance."""
    return AppContext()
