from unittest.mock import MagicMock

import pytest

from expense_core.models import ChatErrorKind, ChatFailure, ChatSuccess, SpendingSummary
from expense_core.prompts import ExpenseForecastPrompt
from expense_core.services import AIService


@pytest.fixture
def fallback_client():
    client = MagicMock()
    client.send.return_value = ChatSuccess(text='Looks good!', model='model-a')
    return client


@pytest.fixture
def ai_service(fallback_client):
    return AIService(fallback_client, language='Spanish')


def sent_prompt(fallback_client):
    return fallback_client.send.call_args.kwargs


class TestAnalyzeExpenses:
    def test_builds_prompt_from_figures(self, ai_service, fallback_client):
        result = ai_service.analyze_expenses(
            total_spent=1234.5,
            by_category={'Food': 800.0, 'Transport': 434.5},
            trends={'Food': '+12.5%'},
            credit_card_debt=300.0
        )

        assert result.text == 'Looks good!'
        prompt = sent_prompt(fallback_client)
        assert 'personal finance' in prompt['system_prompt']
        assert prompt['system_prompt'].endswith('Always answer in Spanish.')
        assert 'Total I spent: $1234.50' in prompt['user_message']
        assert 'My credit card debt: $300.00' in prompt['user_message']
        assert '- Food: $800.00' in prompt['user_message']
        assert '- Food: +12.5%' in prompt['user_message']

    def test_first_month_has_no_trends(self, ai_service, fallback_client):
        ai_service.analyze_expenses(100.0, {'Food': 100.0}, {}, 0.0)

        assert '(This is my first month of data)' in sent_prompt(fallback_client)['user_message']

    def test_analyze_summary_uses_summary_fields(self, ai_service, fallback_client):
        summary = SpendingSummary(total_spent=50.0, by_category={'Food': 50.0}, credit_card_debt=10.0)

        ai_service.analyze_summary(summary)

        message = sent_prompt(fallback_client)['user_message']
        assert 'Total I spent: $50.00' in message
        assert 'My credit card debt: $10.00' in message

    def test_failure_is_returned_unchanged(self, ai_service, fallback_client):
        failure = ChatFailure(kind=ChatErrorKind.EXHAUSTED, message='No more models available to try')
        fallback_client.send.return_value = failure

        assert ai_service.analyze_expenses(1.0, {}, {}, 0.0) is failure


class TestAskAndForecast:
    def test_question_includes_context_json(self, ai_service, fallback_client):
        context = {'total_spent': 150.0, 'by_category': {'Café': 150.0}}

        ai_service.ask_about_expenses('How much on coffee?', context)

        message = sent_prompt(fallback_client)['user_message']
        assert '"Café": 150.0' in message
        assert 'My question: How much on coffee?' in message

    def test_forecast_reports_history_and_average(self, ai_service, fallback_client):
        ai_service.forecast_expenses([100.0, 200.0, 300.0], {'Food': [50.0, 60.0, 70.0]})

        message = sent_prompt(fallback_client)['user_message']
        assert 'Last 3 months (totals): $100.00, $200.00, $300.00' in message
        assert 'Average: $200.00' in message
        assert '- Food: $50.00, $60.00, $70.00' in message

    def test_forecast_average_of_no_history(self):
        assert ExpenseForecastPrompt.average([]) == 0.0

    def test_send_message_passes_prompts_through(self, ai_service, fallback_client):
        ai_service.send_message('hello', 'be nice')

        fallback_client.send.assert_called_once_with(system_prompt='be nice', user_message='hello')

    def test_language_is_configurable(self, fallback_client):
        AIService(fallback_client, language='English').forecast_expenses([1.0], {})

        assert sent_prompt(fallback_client)['system_prompt'].endswith('Always answer in English.')
