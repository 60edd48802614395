"""Configuration management for the pages-deploy CLI."""

import copy
import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_API_BASE_URL
from common.logging_config import get_logger
from uploader.settings import UploadSettings

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in a JSON file."""

    DEFAULT_CONFIG = {
        "api_base_url": DEFAULT_API_BASE_URL,
        "timeout": 30,
        "upload": {},
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.pages-deploy/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.pages-deploy' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root must be an object")
                config = copy.deepcopy(self.DEFAULT_CONFIG)
                config.update(data)
                return config
            except (ValueError, IOError) as e:
                logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError:
                    pass
                return copy.deepcopy(self.DEFAULT_CONFIG)
        else:
            config = copy.deepcopy(self.DEFAULT_CONFIG)
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError:
                pass
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config {self.config_path}: {e}")

    def get_api_token(self) -> Optional[str]:
        """
        Get the account API token.

        CLOUDFLARE_API_TOKEN wins over the config file so tokens never need
        to be written to disk.
        """
        return os.environ.get('CLOUDFLARE_API_TOKEN') or self.data.get('api_token')

    def get_account_id(self) -> Optional[str]:
        return os.environ.get('CLOUDFLARE_ACCOUNT_ID') or self.data.get('account_id')

    def set_account_id(self, account_id: str) -> None:
        """
        Remember the account ID for later runs.

        Args:
            account_id: Account identifier
        """
        self.data['account_id'] = account_id
        self.save()

    def get_base_url(self) -> str:
        """
        Get the API base URL.

        CF_API_BASE_URL is the deprecated name of CLOUDFLARE_API_BASE_URL.

        Returns:
            Base URL string (e.g., "https://api.cloudflare.com/client/v4")
        """
        return (
            os.environ.get('CLOUDFLARE_API_BASE_URL')
            or os.environ.get('CF_API_BASE_URL')
            or self.data.get('api_base_url', DEFAULT_API_BASE_URL)
        )

    def get_timeout(self) -> float:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_upload_settings(self) -> UploadSettings:
        """
        Get upload limits, with any overrides from the "upload" section.

        Returns:
            UploadSettings instance

        Raises:
            ValueError: An override is out of range
        """
        return UploadSettings.from_dict(self.data.get('upload') or {})
