import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from expense_core.api import OpenRouterClient
from expense_core.api.model_fallback_client import (
    DEFAULT_MODELS,
    EXHAUSTED_MESSAGE,
    ModelFallbackClient
)
from expense_core.models import ChatErrorKind, ChatFailure, ChatSuccess

MODELS = ('model-a', 'model-b', 'model-c')


def by_model(responses):
    """Handler returning a fixed response per model"""
    return lambda model, request: responses[model]


class TestModelFallbackClient:
    def test_first_model_success_stops_the_chain(self, fake_chat_client, make_response, chat_body):
        client = fake_chat_client(lambda model, request: make_response(200, chat_body('hello')))
        fallback = ModelFallbackClient(client, models=MODELS)

        result = fallback.send('system', 'hi')

        assert isinstance(result, ChatSuccess)
        assert result.text == 'hello'
        assert result.model == 'model-a'
        assert client.calls == ['model-a']

    def test_all_rate_limited_exhausts_after_one_attempt_per_model(self, fake_chat_client, make_response):
        client = fake_chat_client(lambda model, request: make_response(429, {'error': {'message': 'slow down'}}))
        fallback = ModelFallbackClient(client, models=MODELS)

        result = fallback.send('system', 'hi')

        assert isinstance(result, ChatFailure)
        assert result.kind == ChatErrorKind.EXHAUSTED
        assert result.message == EXHAUSTED_MESSAGE
        assert result.retryable
        assert client.calls == list(MODELS)
        assert [a.kind for a in result.attempts] == [ChatErrorKind.RATE_LIMITED] * 3

    def test_service_unavailable_is_treated_like_rate_limit(self, fake_chat_client, make_response, chat_body):
        client = fake_chat_client(by_model({
            'model-a': make_response(503, text='unavailable'),
            'model-b': make_response(200, chat_body('from b')),
            'model-c': make_response(200, chat_body('from c')),
        }))
        result = ModelFallbackClient(client, models=MODELS).send('system', 'hi')

        assert result.text == 'from b'
        assert client.calls == ['model-a', 'model-b']

    def test_malformed_json_falls_back_to_next_model(self, fake_chat_client, make_response, chat_body):
        client = fake_chat_client(by_model({
            'model-a': make_response(200, text='{not json'),
            'model-b': make_response(200, chat_body('valid')),
            'model-c': make_response(200, chat_body('unused')),
        }))
        result = ModelFallbackClient(client, models=MODELS).send('system', 'hi')

        assert isinstance(result, ChatSuccess)
        assert result.text == 'valid'
        assert result.model == 'model-b'

    def test_last_model_backend_error_reports_its_message(self, fake_chat_client, make_response):
        client = fake_chat_client(by_model({
            'model-a': make_response(429),
            'model-b': make_response(429),
            'model-c': make_response(500, {'error': {'message': 'boom'}}),
        }))
        result = ModelFallbackClient(client, models=MODELS).send('system', 'hi')

        assert isinstance(result, ChatFailure)
        assert result.kind == ChatErrorKind.BACKEND_ERROR
        assert 'boom' in result.message
        assert not result.retryable
        assert result.attempts[-1].status_code == 500

    def test_backend_error_without_message_uses_default(self, fake_chat_client, make_response):
        client = fake_chat_client(lambda model, request: make_response(400, text='oops'))
        result = ModelFallbackClient(client, models=('only',)).send('system', 'hi')

        assert result.kind == ChatErrorKind.BACKEND_ERROR
        assert result.message == 'Unknown error'

    def test_backend_error_on_non_final_model_still_falls_back(self, fake_chat_client, make_response, chat_body):
        client = fake_chat_client(by_model({
            'model-a': make_response(500, {'error': {'message': 'boom'}}),
            'model-b': make_response(200, chat_body('recovered')),
        }))
        result = ModelFallbackClient(client, models=('model-a', 'model-b')).send('system', 'hi')

        assert result.text == 'recovered'

    def test_empty_body_triggers_fallback(self, fake_chat_client, make_response, chat_body):
        client = fake_chat_client(by_model({
            'model-a': make_response(200, text=''),
            'model-b': make_response(200, chat_body('second')),
        }))
        result = ModelFallbackClient(client, models=('model-a', 'model-b')).send('system', 'hi')

        assert result.text == 'second'
        assert client.calls == ['model-a', 'model-b']

    def test_empty_body_on_last_model_is_final(self, fake_chat_client, make_response):
        client = fake_chat_client(lambda model, request: make_response(200, text='   '))
        result = ModelFallbackClient(client, models=MODELS).send('system', 'hi')

        assert result.kind == ChatErrorKind.EMPTY_BODY
        assert result.message == 'Empty response from server'
        assert len(result.attempts) == 3

    def test_missing_content_falls_back(self, fake_chat_client, make_response, chat_body):
        client = fake_chat_client(by_model({
            'model-a': make_response(200, {'choices': []}),
            'model-b': make_response(200, {'choices': [{'message': {'content': None}}]}),
        }))
        result = ModelFallbackClient(client, models=('model-a', 'model-b')).send('system', 'hi')

        assert result.kind == ChatErrorKind.MISSING_CONTENT
        assert [a.detail for a in result.attempts] == [
            'Server response has no valid content',
            'Server response has no content',
        ]

    def test_timeout_is_classified_and_falls_back(self, fake_chat_client, make_response, chat_body):
        client = fake_chat_client(by_model({
            'model-a': requests.Timeout('read timed out'),
            'model-b': make_response(200, chat_body('after timeout')),
        }))
        fallback = ModelFallbackClient(client, models=('model-a', 'model-b'), timeout=5)

        result = fallback.send('system', 'hi')

        assert result.text == 'after timeout'
        assert client.timeouts == [5, 5]

    def test_timeout_on_last_model(self, fake_chat_client):
        client = fake_chat_client(lambda model, request: requests.Timeout('read timed out'))
        result = ModelFallbackClient(client, models=('only',), timeout=60).send('system', 'hi')

        assert result.kind == ChatErrorKind.TIMEOUT
        assert result.message == 'Connection error: timeout after 60s'
        assert result.retryable

    def test_connection_error_is_transport_error(self, fake_chat_client):
        client = fake_chat_client(lambda model, request: requests.ConnectionError('refused'))
        result = ModelFallbackClient(client, models=('only',)).send('system', 'hi')

        assert result.kind == ChatErrorKind.TRANSPORT_ERROR
        assert result.message.startswith('Connection error: ')
        assert 'refused' in result.message

    def test_empty_model_list_is_exhausted(self, fake_chat_client):
        client = fake_chat_client(lambda model, request: pytest.fail('no model should be called'))
        result = ModelFallbackClient(client, models=()).send('system', 'hi')

        assert result.kind == ChatErrorKind.EXHAUSTED
        assert result.message == EXHAUSTED_MESSAGE
        assert result.attempts == []

    def test_prompt_is_forwarded_to_every_attempt(self, fake_chat_client, make_response):
        seen = []

        def handler(model, request):
            seen.append((request.system_prompt, request.user_message))
            return make_response(429)

        ModelFallbackClient(fake_chat_client(handler), models=MODELS).send('be brief', 'question')

        assert seen == [('be brief', 'question')] * 3

    def test_default_models_order(self):
        assert DEFAULT_MODELS == (
            'tngtech/deepseek-r1t-chimera:free',
            'mistralai/mistral-small-3.1-24b-instruct:free',
            'qwen/qwen3-4b:free',
        )

    def test_concurrent_calls_do_not_interfere(self, fake_chat_client, make_response, chat_body):
        def handler(model, request):
            n = int(request.user_message)
            # Odd requests are rate limited on the first model
            if model == 'model-a' and n % 2:
                return make_response(429)
            return make_response(200, chat_body(f"{model}:{n}"))

        fallback = ModelFallbackClient(fake_chat_client(handler), models=MODELS)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda n: fallback.send('system', str(n)), range(40)))

        for n, result in enumerate(results):
            expected_model = 'model-b' if n % 2 else 'model-a'
            assert result.model == expected_model
            assert result.text == f"{expected_model}:{n}"
            assert len(result.text) > 0


class TrickleHandler(BaseHTTPRequestHandler):
    """Answers 200 but sends the body four bytes at a time"""

    def do_POST(self):
        self.rfile.read(int(self.headers.get('Content-Length', 0)))
        body = json.dumps({'choices': [{'message': {'content': 'x' * 200}}]}).encode()
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        try:
            for start in range(0, len(body), 4):
                self.wfile.write(body[start:start + 4])
                self.wfile.flush()
                time.sleep(0.25)
        except OSError:
            pass

    def log_message(self, *args):
        pass


@pytest.fixture
def trickle_server():
    server = ThreadingHTTPServer(('127.0.0.1', 0), TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def test_slow_body_is_cut_off_at_the_attempt_timeout(trickle_server):
    client = OpenRouterClient(api_key='key', base_url=trickle_server, timeout=1.0)
    fallback = ModelFallbackClient(client, models=('only',), timeout=1.0)

    started = time.monotonic()
    result = fallback.send('system', 'hi')
    elapsed = time.monotonic() - started

    assert isinstance(result, ChatFailure)
    assert result.kind == ChatErrorKind.TIMEOUT
    assert elapsed < 2.0
