"""
Configuration manager for Jeopardy board settings.
"""
import logging
from typing import Any, Dict, List

from .models import DEFAULT_API_BASE_URL, GameSettings


class ConfigManager:
    """Manages board dimensions and trivia service settings."""

    # Default configuration values
    DEFAULT_CATEGORY_COUNT = 6
    DEFAULT_CLUES_PER_CATEGORY = 5
    DEFAULT_CATEGORY_POOL_SIZE = 100
    DEFAULT_REQUEST_TIMEOUT = 10

    # Validation limits
    MIN_CATEGORY_COUNT = 1
    MAX_CATEGORY_COUNT = 10  # two panels of five columns
    MIN_CLUES_PER_CATEGORY = 1
    MAX_CLUES_PER_CATEGORY = 5  # Discord allows five button rows per message
    MIN_POOL_SIZE = 1
    MAX_POOL_SIZE = 100  # most the service hands out per request
    MIN_REQUEST_TIMEOUT = 1
    MAX_REQUEST_TIMEOUT = 60

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._settings = GameSettings()

    def get_game_settings(self) -> GameSettings:
        """
        Get a snapshot of the current settings.

        Returns:
            GameSettings copy, safe to hold across a game setup
        """
        return GameSettings(**self._settings.to_dict())

    def apply_config(self, game_config: Dict[str, Any]) -> List[str]:
        """
        Apply the 'game' section of config.json.

        Args:
            game_config: Mapping with any of the GameSettings keys

        Returns:
            User-facing messages for every rejected value
        """
        setters = {
            'api_base_url': self.set_api_base_url,
            'category_count': self.set_category_count,
            'clues_per_category': self.set_clues_per_category,
            'category_pool_size': self.set_category_pool_size,
            'request_timeout': self.set_request_timeout,
        }

        rejected = []
        for key, value in game_config.items():
            setter = setters.get(key)
            if setter is None:
                self.logger.warning(f"Ignoring unknown game setting '{key}'")
                continue
            result = setter(value)
            if not result['success']:
                rejected.append(result['user_message'])
        return rejected

    def _set_bounded_int(self, name: str, attribute: str, value: Any, minimum: int, maximum: int) -> Dict[str, Any]:
        if not isinstance(value, int) or isinstance(value, bool):
            error_msg = f"{name} must be an integer, got {type(value).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(value).__name__}"
            }

        if value < minimum or value > maximum:
            error_msg = f"{name} must be between {minimum} and {maximum}, got {value}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ {name} must be between {minimum} and {maximum}"
            }

        setattr(self._settings, attribute, value)
        self.logger.info(f"{name} set to {value}")
        return {
            'success': True,
            'message': f"{name} set to {value}",
            'user_message': f"✅ {name} set to {value}"
        }

    def set_category_count(self, count: int) -> Dict[str, Any]:
        """Set how many categories (columns) the next board has."""
        return self._set_bounded_int(
            "Category count", 'category_count', count,
            self.MIN_CATEGORY_COUNT, self.MAX_CATEGORY_COUNT
        )

    def set_clues_per_category(self, count: int) -> Dict[str, Any]:
        """Set how many clues (rows) each category of the next board has."""
        return self._set_bounded_int(
            "Clues per category", 'clues_per_category', count,
            self.MIN_CLUES_PER_CATEGORY, self.MAX_CLUES_PER_CATEGORY
        )

    def set_category_pool_size(self, size: int) -> Dict[str, Any]:
        """Set how many categories to request before sampling."""
        return self._set_bounded_int(
            "Category pool size", 'category_pool_size', size,
            self.MIN_POOL_SIZE, self.MAX_POOL_SIZE
        )

    def set_request_timeout(self, seconds: int) -> Dict[str, Any]:
        """Set the total time allowed per trivia service request."""
        return self._set_bounded_int(
            "Request timeout", 'request_timeout', seconds,
            self.MIN_REQUEST_TIMEOUT, self.MAX_REQUEST_TIMEOUT
        )

    def set_api_base_url(self, url: str) -> Dict[str, Any]:
        """Set the trivia service base address."""
        if not isinstance(url, str) or not url.startswith(('http://', 'https://')):
            error_msg = f"API base URL must be an http(s) URL, got {url!r}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "❌ API base URL must start with http:// or https://"
            }

        self._settings.api_base_url = url
        self.logger.info(f"API base URL set to {url}")
        return {
            'success': True,
            'message': f"API base URL set to {url}",
            'user_message': f"✅ API base URL set to {url}"
        }

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._settings = GameSettings(
            api_base_url=DEFAULT_API_BASE_URL,
            category_count=self.DEFAULT_CATEGORY_COUNT,
            clues_per_category=self.DEFAULT_CLUES_PER_CATEGORY,
            category_pool_size=self.DEFAULT_CATEGORY_POOL_SIZE,
            request_timeout=self.DEFAULT_REQUEST_TIMEOUT
        )
        self.logger.info("Settings reset to defaults")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }
        settings = self._settings

        if settings.category_pool_size < settings.category_count:
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Category pool size ({settings.category_pool_size}) is smaller than "
                f"category count ({settings.category_count})"
            )

        if not (self.MIN_CLUES_PER_CATEGORY <= settings.clues_per_category <= self.MAX_CLUES_PER_CATEGORY):
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid clues per category: {settings.clues_per_category}"
            )

        if not (self.MIN_CATEGORY_COUNT <= settings.category_count <= self.MAX_CATEGORY_COUNT):
            validation_result["valid"] = False
            validation_result["issues"].append(
                f"Invalid category count: {settings.category_count}"
            )

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        settings = self._settings
        return (
            f"Board Settings:\n"
            f"• Categories: {settings.category_count}\n"
            f"• Clues per category: {settings.clues_per_category}\n"
            f"• Category pool: {settings.category_pool_size}\n"
            f"• Request timeout: {settings.request_timeout} seconds\n"
            f"• Trivia service: {settings.api_base_url}"
        )
