import json
from unittest.mock import patch

import pytest
import requests

from expense_core.api import ConfigurationError, OpenRouterClient
from expense_core.models import ChatRequest


@pytest.fixture
def session():
    return requests.Session()


def test_missing_api_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        OpenRouterClient(api_key='')


def test_chat_completion_sends_headers_and_payload(session, make_response, chat_body):
    client = OpenRouterClient(
        api_key='secret',
        base_url='https://gateway.test/api/v1/',
        timeout=60,
        referer='http://localhost:8080',
        title='Expense Assistant',
        session=session
    )
    request = ChatRequest(system_prompt='system text', user_message='user text')

    with patch.object(session, 'request', return_value=make_response(200, chat_body('ok'))) as mock_request:
        response = client.chat_completion('model-a', request, timeout=12)

    assert response.status_code == 200
    kwargs = mock_request.call_args.kwargs
    assert kwargs['method'] == 'POST'
    assert kwargs['url'] == 'https://gateway.test/api/v1/chat/completions'
    assert kwargs['timeout'] == 12
    assert 'X-Correlation-ID' in kwargs['headers']
    assert json.loads(kwargs['data']) == {
        'model': 'model-a',
        'messages': [
            {'role': 'system', 'content': 'system text'},
            {'role': 'user', 'content': 'user text'},
        ],
    }

    assert session.headers['Authorization'] == 'Bearer secret'
    assert session.headers['Content-Type'] == 'application/json'
    assert session.headers['Accept'] == 'application/json'
    assert session.headers['HTTP-Referer'] == 'http://localhost:8080'
    assert session.headers['X-Title'] == 'Expense Assistant'


def test_non_success_status_is_returned_not_raised(session, make_response):
    client = OpenRouterClient(api_key='secret', session=session)
    request = ChatRequest(system_prompt='s', user_message='u')

    with patch.object(session, 'request', return_value=make_response(500, {'error': {'message': 'boom'}})):
        response = client.chat_completion('model-a', request)

    assert response.status_code == 500


def test_correlation_ids_are_unique_per_request(session, make_response, chat_body):
    client = OpenRouterClient(api_key='secret', session=session)
    request = ChatRequest(system_prompt='s', user_message='u')

    with patch.object(session, 'request', return_value=make_response(200, chat_body('ok'))) as mock_request:
        client.chat_completion('model-a', request)
        client.chat_completion('model-b', request)

    ids = [c.kwargs['headers']['X-Correlation-ID'] for c in mock_request.call_args_list]
    assert ids[0] != ids[1]
