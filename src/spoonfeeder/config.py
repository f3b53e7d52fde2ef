"""
Local configuration: API address, bearer token and render defaults.

Stored as JSON in the user's home directory.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from spoonfeeder.exceptions import ConfigError
from spoonfeeder.models import RenderMode, SpoonFeederConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Reads and writes :class:`SpoonFeederConfig`."""

    CONFIG_DIR_NAME = ".spoonfeeder"
    CONFIG_FILE_NAME = "config.json"

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Args:
            config_dir: Configuration directory. Defaults to ~/.spoonfeeder/
        """
        if config_dir is None:
            self.config_dir = Path.home() / self.CONFIG_DIR_NAME
        else:
            self.config_dir = Path(config_dir)

        self.config_file = self.config_dir / self.CONFIG_FILE_NAME
        self._config: Optional[SpoonFeederConfig] = None

    def _ensure_config_dir(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> SpoonFeederConfig:
        """
        Load configuration from disk.

        A missing file gives the defaults. So does a corrupted one, with a
        warning; the file is not touched until the next save.
        """
        if self._config is not None:
            return self._config

        if not self.config_file.exists():
            self._config = SpoonFeederConfig()
            return self._config

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._config = SpoonFeederConfig.model_validate(data)
        except (json.JSONDecodeError, PydanticValidationError, ValueError) as e:
            logger.warning(f"Ignoring corrupted config {self.config_file}: {e}")
            self._config = SpoonFeederConfig()

        return self._config

    def save(self, config: Optional[SpoonFeederConfig] = None) -> None:
        """
        Write configuration to disk.

        Args:
            config: Configuration to store. Defaults to the current one.
        """
        if config is not None:
            self._config = config

        if self._config is None:
            return

        self._ensure_config_dir()

        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self._config.model_dump(mode="json"), f, indent=2, ensure_ascii=False)

        logger.debug(f"Saved config to {self.config_file}")

    def get_config(self) -> SpoonFeederConfig:
        """Current configuration."""
        if self._config is None:
            return self.load()
        return self._config

    def set_api_url(self, url: str) -> None:
        """
        Set the content API base URL.

        Args:
            url: Base URL including the ``/api`` prefix
                 (e.g. http://localhost:5000/api)

        Raises:
            ConfigError: If the URL is not http(s)
        """
        url = url.strip()
        if not url.startswith(("http://", "https://")):
            raise ConfigError(f"API URL must start with http:// or https://: {url}")
        config = self.get_config()
        config.api_url = url.rstrip("/")
        self.save()

    def set_token(self, token: Optional[str]) -> None:
        """Store the bearer token, or clear it with ``None``/empty."""
        config = self.get_config()
        config.token = token.strip() if token and token.strip() else None
        self.save()

    def get_token(self) -> Optional[str]:
        return self.get_config().token

    def set_default_mode(self, mode: Union[RenderMode, str]) -> None:
        """
        Set the mode used when none is given.

        Raises:
            ConfigError: For anything other than normal, math or code
        """
        if isinstance(mode, str):
            try:
                mode = RenderMode(mode.strip().lower())
            except ValueError:
                raise ConfigError(f"Unknown render mode: {mode}")
        config = self.get_config()
        config.default_mode = mode
        self.save()

    def set_detect_code(self, enabled: bool) -> None:
        config = self.get_config()
        config.detect_code = enabled
        self.save()

    def clear_all(self) -> None:
        """Reset to defaults and remove the config file."""
        self._config = SpoonFeederConfig()
        if self.config_file.exists():
            self.config_file.unlink()


# Shared configuration manager
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """
    Return the shared configuration manager.

    Args:
        config_dir: Configuration directory; passing one replaces the shared
                    instance.
    """
    global _config_manager

    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)

    return _config_manager
