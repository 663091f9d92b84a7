import pytest

from expense_core import ConfigManager, ConfigurationError, CredentialsManager
from expense_core.api.model_fallback_client import DEFAULT_MODELS

ENV_VARS = [
    'OPENROUTER_BASE_URL', 'OPENROUTER_MODELS', 'OPENROUTER_TIMEOUT', 'OPENROUTER_REFERER',
    'OPENROUTER_TITLE', 'AI_RESPONSE_LANGUAGE', 'AUTH_PROVIDER', 'SESSION_PREFERENCES_PATH',
    'SESSION_KEYRING_SERVICE', 'EXPORT_DIRECTORY', 'LOG_LEVEL',
    'OPENROUTER_API_KEY', 'FIREBASE_WEB_API_KEY', 'FIREBASE_SERVICE_ACCOUNT',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = ConfigManager(load_env=False)

    assert config.get('ai.base_url') == 'https://openrouter.ai/api/v1'
    assert config.get('ai.models') == list(DEFAULT_MODELS)
    assert config.get('ai.timeout') == 60.0
    assert config.get('ai.language') == 'Spanish'
    assert config.get('auth.provider') == 'mock'
    assert config.get('export.directory') == 'exports'
    assert config.get('logging.level') == 'INFO'


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('OPENROUTER_MODELS', 'one, two ,,three')
    monkeypatch.setenv('OPENROUTER_TIMEOUT', '15')
    monkeypatch.setenv('AUTH_PROVIDER', 'Firebase')

    config = ConfigManager(load_env=False)

    assert config.get('ai.models') == ['one', 'two', 'three']
    assert config.get('ai.timeout') == 15.0
    assert config.get('auth.provider') == 'firebase'


def test_get_missing_and_falsy_values():
    config = ConfigManager(load_env=False, overrides={'feature.enabled': False})

    assert config.get('feature.enabled', True) is False
    assert config.get('nope.nothing', 'fallback') == 'fallback'
    assert config.get('ai.base_url.deeper', 'fallback') == 'fallback'


def test_credentials_from_environment(monkeypatch):
    monkeypatch.setenv('OPENROUTER_API_KEY', 'env-key')

    credentials = CredentialsManager()

    assert credentials.get_openrouter_api_key() == 'env-key'
    assert credentials.get_firebase_service_account() is None


def test_constructor_credentials_take_priority(monkeypatch):
    monkeypatch.setenv('OPENROUTER_API_KEY', 'env-key')

    assert CredentialsManager(openrouter_api_key='arg-key').get_openrouter_api_key() == 'arg-key'


def test_missing_credentials_raise_when_requested():
    credentials = CredentialsManager()

    with pytest.raises(ConfigurationError):
        credentials.get_openrouter_api_key()
    with pytest.raises(ConfigurationError):
        credentials.get_firebase_api_key()

    credentials.update_credentials(firebase_api_key='web-key')
    assert credentials.get_firebase_api_key() == 'web-key'
