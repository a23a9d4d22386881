"""Settings loader for reading service configuration from YAML."""
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_DATASET_PATH = "data/taco/TACO.json"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the search engine and its surfaces."""

    dataset_path: str = DEFAULT_DATASET_PATH
    default_limit: int = 10
    fuzzy: float = 0.2  # Edit distance tolerance as a fraction of token length
    prefix: bool = True
    description_boost: float = 2.0
    category_boost: float = 1.0
    host: str = "127.0.0.1"
    port: int = 3001
    log_level: str = "INFO"

    def with_env(self, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """Overlay TACO_* environment variables on these settings.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            New Settings object

        Raises:
            ValueError: If TACO_PORT is not an integer
        """
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        if env.get("TACO_DATASET_PATH"):
            overrides["dataset_path"] = env["TACO_DATASET_PATH"]
        if env.get("TACO_HOST"):
            overrides["host"] = env["TACO_HOST"]
        if env.get("TACO_PORT"):
            try:
                overrides["port"] = int(env["TACO_PORT"])
            except ValueError:
                raise ValueError(
                    f"TACO_PORT must be an integer, got {env['TACO_PORT']!r}"
                ) from None
        if env.get("TACO_LOG_LEVEL"):
            overrides["log_level"] = env["TACO_LOG_LEVEL"].upper()
        return replace(self, **overrides)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create default settings overridden by environment variables."""
        return cls().with_env()


class SettingsLoader:
    """Loader for service settings from YAML."""

    def __init__(self, yaml_path: str):
        """Initialize settings loader from YAML file.

        Args:
            yaml_path: Path to YAML file containing settings
        """
        self.yaml_path = Path(yaml_path)

    def load(self) -> Settings:
        """Load settings from YAML file.

        Every section and key is optional; missing values keep their
        defaults.

        Returns:
            Settings object

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If the file is not valid YAML
            ValueError: If a section or value has the wrong type
        """
        with open(self.yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {self.yaml_path} must contain a mapping")

        dataset = self._section(data, "dataset")
        search = self._section(data, "search")
        server = self._section(data, "server")
        logging_section = self._section(data, "logging")

        defaults = Settings()
        try:
            return Settings(
                dataset_path=str(dataset.get("path", defaults.dataset_path)),
                default_limit=int(search.get("default_limit", defaults.default_limit)),
                fuzzy=float(search.get("fuzzy", defaults.fuzzy)),
                prefix=bool(search.get("prefix", defaults.prefix)),
                description_boost=float(
                    search.get("description_boost", defaults.description_boost)
                ),
                category_boost=float(search.get("category_boost", defaults.category_boost)),
                host=str(server.get("host", defaults.host)),
                port=int(server.get("port", defaults.port)),
                log_level=str(logging_section.get("level", defaults.log_level)).upper(),
            )
        except TypeError as e:
            raise ValueError(f"Invalid value in {self.yaml_path}: {e}") from e

    def _section(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"Section '{name}' in {self.yaml_path} must be a mapping")
        return section
