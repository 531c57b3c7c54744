"""OS keyring access for the Graph application secret."""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)


class CredentialManager:
    """Keyring interface for the app registration client secret."""

    def __init__(self, service_name: str = "device-cleanup"):
        self.service_name = service_name

    def get_credential(self, username: str) -> Optional[str]:
        """
        Get a credential from the OS keyring.

        Args:
            username: The username the secret is stored under (the client id)

        Returns:
            The credential value if found, None otherwise
        """
        try:
            password = keyring.get_password(self.service_name, username)
        except KeyringError as e:
            logger.error(f"Error accessing keyring entry {self.service_name}/{username}: {e}")
            return None

        if password:
            logger.debug(f"Found keyring credential for {self.service_name}/{username}")
            return password

        logger.warning(f"Keyring credential not found for {self.service_name}/{username}")
        return None
