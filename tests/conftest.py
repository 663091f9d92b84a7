import json
import threading
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from keyring.errors import PasswordDeleteError

from expense_core.models import Category, Expense


def _make_response(status_code=200, json_body=None, text=None):
    if text is None:
        text = json.dumps(json_body) if json_body is not None else ''
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.side_effect = lambda: json.loads(text)
    return response


def _chat_body(content):
    return {'choices': [{'message': {'role': 'assistant', 'content': content}}]}


class FakeChatClient:
    """Stands in for OpenRouterClient; `handler(model, request)` returns a response or an exception"""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []
        self.timeouts = []
        self._lock = threading.Lock()

    def chat_completion(self, model, request, timeout=None):
        with self._lock:
            self.calls.append(model)
            self.timeouts.append(timeout)
        result = self.handler(model, request)
        if isinstance(result, Exception):
            raise result
        return result


class FakeKeyring:
    """In-memory replacement for the keyring module API"""

    def __init__(self):
        self.passwords = {}

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("not found")
        del self.passwords[(service, username)]


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def chat_body():
    return _chat_body


@pytest.fixture
def fake_chat_client():
    return FakeChatClient


@pytest.fixture
def fake_keyring():
    return FakeKeyring()


@pytest.fixture
def categories():
    return {
        1: Category(id=1, name='Food', icon='restaurant', color='#FF9800'),
        2: Category(id=2, name='Transport', icon='directions_car', color='#2196F3'),
    }


@pytest.fixture
def expenses():
    """Two months of expenses: May has two food and one transport, April one food"""
    return [
        Expense(id=1, user_id=1, amount=100.0, description='Groceries',
                date=datetime(2024, 5, 10), category_id=1),
        Expense(id=2, user_id=1, amount=50.0, description='Restaurant',
                date=datetime(2024, 5, 20), category_id=1),
        Expense(id=3, user_id=1, amount=30.0, description='Bus pass',
                date=datetime(2024, 5, 2), category_id=2,
                is_credit_card=True, total_installments=3, current_installment=1),
        Expense(id=4, user_id=1, amount=120.0, description='Groceries',
                date=datetime(2024, 4, 15), category_id=1),
    ]
