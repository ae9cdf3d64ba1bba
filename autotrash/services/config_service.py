# autotrash/services/config_service.py
import json
import logging
from typing import Optional, Any, Dict

logger = logging.getLogger(__name__)

AUTO_TRASH_SECTION = "auto_trash"


class ConfigService:
    """
    Service for reading configuration data from a JSON file.
    """

    def __init__(self, settings_path: str = "data/settings.json"):
        """
        Initializes the ConfigService and loads configuration data.

        Args:
            settings_path: Path to the JSON settings file.
        """
        self.settings_path: str = settings_path
        self._config_data: Optional[Dict[str, Any]] = self._load_config()

    def _load_config(self) -> Optional[Dict[str, Any]]:
        """
        Loads the configuration data from the settings file.

        Returns:
            A dictionary containing the configuration data, or None if loading fails.
        """
        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return data
        except FileNotFoundError:
            logger.warning(f"Settings file not found at {self.settings_path}")
            return None
        except json.JSONDecodeError:
            logger.error(f"Could not decode JSON from {self.settings_path}")
            return None

    def get_config_section(self, section_name: str) -> Optional[Any]:
        """
        Retrieves a specific section from the loaded configuration data.

        Returns:
            The data for the requested section, or None if the section
            is not found or if the configuration was not loaded.
        """
        if self._config_data is None:
            return None
        return self._config_data.get(section_name)

    def get_value(self, key: str, default: Any = None) -> Any:
        if self._config_data is None:
            return default
        return self._config_data.get(key, default)

    def get_auto_trash_settings(self) -> Dict[str, Any]:
        section = self.get_config_section(AUTO_TRASH_SECTION)
        return section if isinstance(section, dict) else {}

    def get_global_rules_section(self) -> Optional[Dict[str, Any]]:
        rules = self.get_auto_trash_settings().get("global_rules")
        return rules if isinstance(rules, dict) else None

    def show_pickup_notifications(self) -> bool:
        return bool(self.get_auto_trash_settings().get("show_pickup_notifications", True))

    def default_language(self) -> str:
        return str(self.get_auto_trash_settings().get("default_language", "en"))
