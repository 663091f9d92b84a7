from typing import Optional
import os
from pydantic import BaseModel, Field
import logging

from .api.errors import ConfigurationError


class APICredentials(BaseModel):
    """Model for API credentials"""
    openrouter_api_key: Optional[str] = Field(None, description="OpenRouter API key")
    firebase_api_key: Optional[str] = Field(None, description="Firebase web API key")
    firebase_service_account: Optional[str] = Field(None, description="Path to the Firebase service account JSON")


class CredentialsManager:
    """
    Resolves API credentials from constructor arguments or the environment.

    Missing values are only an error when the credential is requested.
    """
    def __init__(
        self,
        openrouter_api_key: Optional[str] = None,
        firebase_api_key: Optional[str] = None,
        firebase_service_account: Optional[str] = None
    ):
        """
        Initialize credentials manager

        Args:
            openrouter_api_key (Optional[str]): OpenRouter API key
            firebase_api_key (Optional[str]): Firebase web API key
            firebase_service_account (Optional[str]): Service account JSON path
        """
        self.logger = logging.getLogger(__name__)

        # Constructor parameters take priority over environment variables
        self.credentials = APICredentials(
            openrouter_api_key=openrouter_api_key or os.getenv('OPENROUTER_API_KEY'),
            firebase_api_key=firebase_api_key or os.getenv('FIREBASE_WEB_API_KEY'),
            firebase_service_account=firebase_service_account or os.getenv('FIREBASE_SERVICE_ACCOUNT')
        )

        self.logger.debug("Credentials manager initialized")

    def get_openrouter_api_key(self) -> str:
        """Get the OpenRouter API key"""
        if not self.credentials.openrouter_api_key:
            raise ConfigurationError("OPENROUTER_API_KEY is not set")
        return self.credentials.openrouter_api_key

    def get_firebase_api_key(self) -> str:
        """Get the Firebase web API key"""
        if not self.credentials.firebase_api_key:
            raise ConfigurationError("FIREBASE_WEB_API_KEY is not set")
        return self.credentials.firebase_api_key

    def get_firebase_service_account(self) -> Optional[str]:
        """Get the service account path, None to use application default credentials"""
        return self.credentials.firebase_service_account

    def update_credentials(
        self,
        openrouter_api_key: Optional[str] = None,
        firebase_api_key: Optional[str] = None,
        firebase_service_account: Optional[str] = None
    ):
        """
        Update credentials

        Args:
            openrouter_api_key (Optional[str]): New OpenRouter API key
            firebase_api_key (Optional[str]): New Firebase web API key
            firebase_service_account (Optional[str]): New service account path
        """
        if openrouter_api_key:
            self.credentials.openrouter_api_key = openrouter_api_key
        if firebase_api_key:
            self.credentials.firebase_api_key = firebase_api_key
        if firebase_service_account:
            self.credentials.firebase_service_account = firebase_service_account

        self.logger.info("Credentials updated")
