"""
Firebase identity provider.

Wraps the Firebase Admin SDK to issue password reset links. The SDK is
synchronous, so calls run in a worker thread to keep the event loop free.
"""

import asyncio
import os
import structlog
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from backend.src.config import Settings
from backend.src.errors import ProviderError

logger = structlog.get_logger(__name__)


class FirebaseIdentityProvider:
    """Identity provider backed by a firebase_admin app."""

    def __init__(
        self,
        app: firebase_admin.App,
        action_code_settings: Optional[auth.ActionCodeSettings] = None
    ):
        """
        Initialize identity provider.

        Args:
            app: Initialized firebase_admin app
            action_code_settings: Optional continue-URL settings for reset links
        """
        self.app = app
        self.action_code_settings = action_code_settings

    @classmethod
    def from_service_account(cls, path: str, app_name: str) -> "FirebaseIdentityProvider":
        """
        Build a provider from a service account JSON file.

        Reuses the named app when it was already initialized in this process.

        Args:
            path: Service account JSON path
            app_name: firebase_admin app name

        Returns:
            Identity provider
        """
        try:
            app = firebase_admin.get_app(app_name)
        except ValueError:
            app = firebase_admin.initialize_app(credentials.Certificate(path), name=app_name)
            logger.info("firebase_app_initialized", app_name=app_name)
        return cls(app)

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["FirebaseIdentityProvider"]:
        """
        Build a provider from settings.

        Returns None (after logging an error) when the service account file
        is missing; password resets then fail with ProviderError.
        """
        path = settings.firebase_credentials_path
        if not os.path.exists(path):
            logger.error("firebase_service_account_missing", path=path)
            return None
        return cls.from_service_account(path, settings.firebase_app_name)

    async def generate_password_reset_link(self, email: Optional[str]) -> str:
        """
        Generate a password reset link for ``email``.

        Args:
            email: Account email

        Returns:
            Reset link

        Raises:
            ProviderError: If the provider rejects the email
        """
        try:
            link = await asyncio.to_thread(
                auth.generate_password_reset_link,
                email,
                self.action_code_settings,
                self.app
            )
        except (FirebaseError, ValueError) as e:
            logger.warning("password_reset_link_failed", error=str(e))
            raise ProviderError() from e

        logger.info("password_reset_link_generated")
        return link
