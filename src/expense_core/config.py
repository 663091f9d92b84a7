import os
import logging
from typing import Any, Dict, List, Optional

import structlog
from dotenv import load_dotenv

from .api.model_fallback_client import DEFAULT_MODELS

_MISSING = object()


def _split_list(value: Optional[str], default: List[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


class ConfigManager:
    """
    Application settings as a nested dict, loaded from the environment.

    Values are read once at construction; `.env` is loaded first when
    `load_env` is set.
    """

    def __init__(self, load_env: bool = True, overrides: Optional[Dict[str, Any]] = None):
        if load_env:
            load_dotenv()
        self._config: Dict[str, Any] = self._load_config()
        for key, value in (overrides or {}).items():
            self.set(key, value)

    @staticmethod
    def _load_config() -> Dict[str, Any]:
        return {
            'environment': {'current': os.getenv('APP_ENV', 'development')},
            'ai': {
                'base_url': os.getenv('OPENROUTER_BASE_URL', 'https://openrouter.ai/api/v1'),
                'models': _split_list(os.getenv('OPENROUTER_MODELS'), list(DEFAULT_MODELS)),
                'timeout': float(os.getenv('OPENROUTER_TIMEOUT', 60)),
                'referer': os.getenv('OPENROUTER_REFERER', 'http://localhost:8080'),
                'title': os.getenv('OPENROUTER_TITLE', 'Expense Assistant'),
                'language': os.getenv('AI_RESPONSE_LANGUAGE', 'Spanish')
            },
            'auth': {
                'provider': os.getenv('AUTH_PROVIDER', 'mock').lower()
            },
            'session': {
                'preferences_path': os.getenv(
                    'SESSION_PREFERENCES_PATH',
                    os.path.join('~', '.expense_assistant', 'session.json')
                ),
                'keyring_service': os.getenv('SESSION_KEYRING_SERVICE', 'expense-assistant')
            },
            'export': {
                'directory': os.getenv('EXPORT_DIRECTORY', 'exports')
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL', 'INFO')
            }
        }

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Retrieve a value by dotted key, e.g. `ai.timeout`
        """
        value: Any = self._config
        for k in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(k, _MISSING)
            if value is _MISSING:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a value by dotted key, creating intermediate sections"""
        keys = key.split('.')
        section = self._config
        for k in keys[:-1]:
            section = section.setdefault(k, {})
        section[keys[-1]] = value

    def setup_logging(self) -> None:
        """
        Configure stdlib logging and structlog
        """
        log_level = self.get('logging.level', 'INFO')

        logging.basicConfig(
            level=getattr(logging, str(log_level).upper(), logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
