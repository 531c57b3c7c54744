# src/device_cleanup/config.py

import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .utils.credential_manager import CredentialManager
from .utils.yaml_loader import DEFAULT_CONFIG_DIR, load_yaml

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_ENDPOINT = "https://graph.microsoft.com/v1.0"
SETTINGS_ENV_VAR = "DEVICE_CLEANUP_SETTINGS"


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


class Config:
    """Configuration manager for the device cleanup tool."""

    def __init__(self, settings_path: Optional[str] = None,
                 settings: Optional[Dict[str, Any]] = None,
                 credential_manager: Optional[CredentialManager] = None):
        """
        Initialize configuration from a YAML settings file and the environment.

        Args:
            settings_path: Path to a settings YAML file. Falls back to
                $DEVICE_CLEANUP_SETTINGS, then config/settings.yaml.
            settings: Pre-loaded settings dict (skips file loading)
            credential_manager: Keyring access used to resolve the client secret
        """
        if settings is not None:
            self.settings = settings
        else:
            explicit = settings_path or os.getenv(SETTINGS_ENV_VAR)
            # Explicit paths are relative to the working directory, not config/
            if explicit:
                self.settings = load_yaml(Path(explicit).resolve())
            elif (DEFAULT_CONFIG_DIR / "settings.yaml").exists():
                self.settings = load_yaml("settings.yaml")
            else:
                logger.debug("No settings.yaml found; using environment only")
                self.settings = {}
        self.credential_manager = credential_manager or CredentialManager(
            self.settings.get('keyring', {}).get('service', 'device-cleanup')
        )
        self._secrets_cache: Dict[str, str] = {}

    # ========== Paths ==========

    @property
    def input_path(self) -> Optional[Path]:
        value = os.getenv("DEVICE_CLEANUP_INPUT") or self.settings.get('input_path')
        return Path(value) if value else None

    @property
    def output_path(self) -> Optional[Path]:
        value = os.getenv("DEVICE_CLEANUP_OUTPUT") or self.settings.get('output_path')
        return Path(value) if value else None

    # ========== Graph ==========

    @property
    def graph_settings(self) -> Dict[str, Any]:
        return self.settings.get('graph', {}) or {}

    @property
    def tenant_id(self) -> Optional[str]:
        return os.getenv("DEVICE_CLEANUP_TENANT_ID") or self.graph_settings.get('tenant_id')

    @property
    def client_id(self) -> Optional[str]:
        return os.getenv("DEVICE_CLEANUP_CLIENT_ID") or self.graph_settings.get('client_id')

    @property
    def graph_endpoint(self) -> str:
        return self.graph_settings.get('endpoint') or DEFAULT_GRAPH_ENDPOINT

    @property
    def graph_timeout(self) -> float:
        return float(self.graph_settings.get('timeout', 30))

    def get_client_secret(self) -> Optional[str]:
        """
        Get the app registration client secret.
        Checks cache, the environment, then the OS keyring.
        """
        if 'CLIENT_SECRET' in self._secrets_cache:
            return self._secrets_cache['CLIENT_SECRET']

        value = os.getenv("DEVICE_CLEANUP_CLIENT_SECRET")
        if not value and self.client_id:
            value = self.credential_manager.get_credential(self.client_id)

        if value:
            self._secrets_cache['CLIENT_SECRET'] = value
        return value

    def get_graph_credentials(self) -> Dict[str, Optional[str]]:
        """Get Microsoft Graph credentials as dictionary."""
        return {
            'tenant_id': self.tenant_id,
            'client_id': self.client_id,
            'client_secret': self.get_client_secret(),
        }

    # ========== Logging ==========

    @property
    def log_level(self) -> str:
        return self.settings.get('logging', {}).get('level', 'INFO')

    @property
    def log_to_file(self) -> bool:
        return bool(self.settings.get('logging', {}).get('to_file', False))

    @property
    def log_dir(self) -> str:
        return self.settings.get('logging', {}).get('dir', 'logs')

    # ========== Validation ==========

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when usable)."""
        problems = []
        creds = self.get_graph_credentials()
        for key, value in creds.items():
            if not value:
                problems.append(f"Missing Graph credential: {key}")
        return problems

    def require_valid(self) -> None:
        """Raise ConfigError if any credential is missing."""
        problems = self.validate()
        if problems:
            for problem in problems:
                logger.error(problem)
            raise ConfigError("; ".join(problems))
