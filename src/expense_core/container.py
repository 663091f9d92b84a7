"""
Dependency injection container for the expense assistant.

This module provides a centralized container for all dependencies. Every
service is created on first use, so commands that never touch the AI
gateway or Firebase do not need their credentials.
"""

from dependency_injector import containers, providers

from .config import ConfigManager
from .credentials import CredentialsManager

# Import API clients
from .api import OpenRouterClient, ModelFallbackClient

# Import services
from .services import (
    AIService,
    ExpenseAnalysisService,
    MockAuthService,
    FirebaseAuthService,
    SessionStore,
    ExportService,
    DivisionService
)


class Container(containers.DeclarativeContainer):
    """
    Centralized dependency injection container for the application.

    Wires the gateway clients, the AI and analysis services, the
    configured auth provider, the session store and the exporter.
    """
    # Core configuration
    config = providers.Singleton(ConfigManager)

    # Credentials management
    credentials_manager = providers.Singleton(
        CredentialsManager
    )

    # LLM gateway
    openrouter_client = providers.Singleton(
        OpenRouterClient,
        api_key=credentials_manager.provided.get_openrouter_api_key.call(),
        base_url=config.provided.get.call('ai.base_url'),
        timeout=config.provided.get.call('ai.timeout'),
        referer=config.provided.get.call('ai.referer'),
        title=config.provided.get.call('ai.title')
    )

    fallback_client = providers.Singleton(
        ModelFallbackClient,
        client=openrouter_client,
        models=config.provided.get.call('ai.models'),
        timeout=config.provided.get.call('ai.timeout')
    )

    # AI and analysis services
    ai_service = providers.Singleton(
        AIService,
        fallback_client=fallback_client,
        language=config.provided.get.call('ai.language')
    )

    analysis_service = providers.Singleton(
        ExpenseAnalysisService
    )

    # Authentication providers
    mock_auth_service = providers.Singleton(
        MockAuthService
    )

    firebase_auth_service = providers.Singleton(
        FirebaseAuthService,
        api_key=credentials_manager.provided.get_firebase_api_key.call(),
        service_account_path=credentials_manager.provided.get_firebase_service_account.call()
    )

    auth_provider = providers.Selector(
        config.provided.get.call('auth.provider', 'mock'),
        mock=mock_auth_service,
        firebase=firebase_auth_service
    )

    # Local session and exports
    session_store = providers.Singleton(
        SessionStore,
        preferences_path=config.provided.get.call('session.preferences_path'),
        service_name=config.provided.get.call('session.keyring_service')
    )

    export_service = providers.Singleton(
        ExportService,
        directory=config.provided.get.call('export.directory')
    )

    division_service = providers.Singleton(DivisionService)
