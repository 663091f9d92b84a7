"""
Core module for the expense assistant.

This module provides the LLM gateway clients with model fallback, the
expense data models, the AI, analysis, auth, session and export services,
and the dependency injection container.
"""

# Import API clients
from .api import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    SessionStorageError,
    OpenRouterClient,
    ModelFallbackClient,
    DEFAULT_MODELS
)

# Import models
from .models import (
    ChatErrorKind,
    ChatSuccess,
    ChatFailure,
    ChatResult,
    Category,
    Budget,
    BudgetStatus,
    Expense,
    User,
    AuthResponse,
    MonthlyReport,
    SpendingSummary
)

# Import utilities
from .utils import DateFormatter

# Import services
from .services import (
    AIService,
    ExpenseAnalysisService,
    AuthProvider,
    MockAuthService,
    FirebaseAuthService,
    SessionStore,
    ExportService
)

# Import configuration and dependency injection container
from .config import ConfigManager
from .credentials import CredentialsManager
from .container import Container

__all__ = [
    # API clients
    'OpenRouterClient',
    'ModelFallbackClient',
    'DEFAULT_MODELS',

    # Error classes
    'APIError',
    'AuthenticationError',
    'ConfigurationError',
    'SessionStorageError',

    # Models
    'ChatErrorKind',
    'ChatSuccess',
    'ChatFailure',
    'ChatResult',
    'Category',
    'Budget',
    'BudgetStatus',
    'Expense',
    'User',
    'AuthResponse',
    'MonthlyReport',
    'SpendingSummary',

    # Utilities
    'DateFormatter',

    # Services
    'AIService',
    'ExpenseAnalysisService',
    'AuthProvider',
    'MockAuthService',
    'FirebaseAuthService',
    'SessionStore',
    'ExportService',

    # Configuration and dependency injection
    'ConfigManager',
    'CredentialsManager',
    'Container'
]
