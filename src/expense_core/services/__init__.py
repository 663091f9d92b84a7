"""
Services module for the expense assistant.

This module contains the AI, analysis, authentication, session,
export and division services.
"""

from .ai_service import AIService
from .analysis_service import ExpenseAnalysisService
from .auth_service import AuthProvider, MockAuthService
from .firebase_auth_service import FirebaseAuthService
from .session_store import SessionStore
from .export_service import ExportService
from .division_service import DivisionService

__all__ = [
    'AIService',
    'ExpenseAnalysisService',
    'AuthProvider',
    'MockAuthService',
    'FirebaseAuthService',
    'SessionStore',
    'ExportService',
    'DivisionService'
]
