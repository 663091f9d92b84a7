import json
import os
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner
from dependency_injector import providers

from expense_cli.main import cli
from expense_core import ConfigManager, Container, SessionStore
from expense_core.models import ChatErrorKind, ChatFailure, ChatSuccess


@pytest.fixture
def ai_service():
    service = MagicMock()
    answer = ChatSuccess(text='You are doing great', model='model-a')
    service.analyze_summary.return_value = answer
    service.ask_about_expenses.return_value = answer
    service.forecast_expenses.return_value = answer
    return service


@pytest.fixture
def container(tmp_path, fake_keyring, ai_service):
    container = Container()
    config = ConfigManager(load_env=False, overrides={
        'auth.provider': 'mock',
        'export.directory': str(tmp_path / 'exports'),
        'logging.level': 'WARNING',
    })
    container.config.override(providers.Object(config))
    container.session_store.override(providers.Object(
        SessionStore(str(tmp_path / 'session.json'), 'expense-test', fake_keyring)
    ))
    container.ai_service.override(providers.Object(ai_service))
    return container


@pytest.fixture
def data_file(tmp_path, expenses, categories):
    path = tmp_path / 'data.json'
    path.write_text(json.dumps({
        'categories': [c.to_map() for c in categories.values()],
        'expenses': [e.to_firestore_map() for e in expenses],
    }), encoding='utf-8')
    return str(path)


@pytest.fixture
def run(container):
    runner = CliRunner()
    return lambda *args: runner.invoke(cli, list(args), obj=container)


class TestSession:
    def test_login_whoami_logout(self, run):
        result = run('login', '--email', 'admin@test.com', '--password', '123456')
        assert result.exit_code == 0, result.output
        assert 'Signed in as Administrator' in result.output

        result = run('whoami')
        assert 'admin@test.com' in result.output

        result = run('logout')
        assert result.exit_code == 0
        assert 'Not signed in' in run('whoami').output

    def test_login_failure(self, run):
        result = run('login', '--email', 'admin@test.com', '--password', 'nope')

        assert result.exit_code == 1
        assert 'Invalid email or password' in result.output


class TestAiCommands:
    def test_analyze(self, run, data_file, ai_service):
        result = run('analyze', data_file)

        assert result.exit_code == 0, result.output
        assert 'May 2024: $180.00 across 3 expenses' in result.output
        assert '50.0% more than the previous month' in result.output
        assert 'Top category: Food ($150.00)' in result.output
        assert 'You are doing great' in result.output
        summary = ai_service.analyze_summary.call_args.args[0]
        assert summary.total_spent == 180.0
        assert summary.trends == {'Food': '+25.0%'}

    def test_analyze_empty_month(self, run, data_file):
        result = run('analyze', data_file, '--month', '2023-01')

        assert result.exit_code == 1
        assert 'No expenses in 2023-01' in result.output

    def test_bad_month(self, run, data_file):
        assert run('analyze', data_file, '--month', 'May').exit_code == 2

    def test_failure_is_reported(self, run, data_file, ai_service):
        ai_service.analyze_summary.return_value = ChatFailure(
            kind=ChatErrorKind.EXHAUSTED, message='No more models available to try'
        )

        result = run('analyze', data_file)

        assert result.exit_code == 1
        assert '[exhausted] No more models available to try' in result.output
        assert 'Try again in a moment' in result.output

    def test_ask(self, run, data_file, ai_service):
        result = run('ask', data_file, 'Where does my money go?')

        assert result.exit_code == 0, result.output
        question, context = ai_service.ask_about_expenses.call_args.args
        assert question == 'Where does my money go?'
        assert context['recent_expenses'][0]['description'] == 'Restaurant'

    def test_forecast(self, run, data_file, ai_service):
        result = run('forecast', data_file, '--months', '3')

        assert result.exit_code == 0, result.output
        totals, per_category = ai_service.forecast_expenses.call_args.args
        assert totals == [0.0, 120.0, 180.0]
        assert per_category['Transport'] == [0.0, 0.0, 30.0]


class TestExport:
    def test_csv(self, run, data_file, tmp_path):
        result = run('export', data_file, '--output', 'all.csv')

        assert result.exit_code == 0, result.output
        path = tmp_path / 'exports' / 'all.csv'
        assert 'Exported 4 expenses' in result.output
        assert path.read_text(encoding='utf-8').startswith('Date,Description,Amount')

    def test_pdf(self, run, data_file, tmp_path):
        result = run('export', data_file, '--format', 'pdf', '--directory', str(tmp_path / 'pdf'))

        assert result.exit_code == 0, result.output
        files = os.listdir(tmp_path / 'pdf')
        assert len(files) == 1 and files[0].endswith('.pdf')


class TestSplit:
    def test_split_by_percentage_and_settle(self, run, data_file):
        result = run('split', data_file, '-p', 'Ana:60', '-p', 'Luis:40', '--paid', 'Ana:300')

        assert result.exit_code == 0, result.output
        assert 'Division: Expenses' in result.output
        assert 'Total: $300.00' in result.output
        assert '  - Ana: $180.00 (60.0%)' in result.output
        assert 'Luis pays Ana $120.00' in result.output

    def test_equal_split_of_one_month(self, run, data_file):
        result = run('split', data_file, '--month', '2024-05', '-p', 'Ana', '-p', 'Luis')

        assert result.exit_code == 0, result.output
        assert 'Division: 2024-05' in result.output
        assert '  - Ana: $90.00 (50.0%)' in result.output
        assert '  - Luis: $90.00 (50.0%)' in result.output

    def test_mixed_percentages_are_rejected(self, run, data_file):
        result = run('split', data_file, '-p', 'Ana:60', '-p', 'Luis')

        assert result.exit_code == 2
        assert 'every participant or for none' in result.output

    def test_percentages_not_adding_up(self, run, data_file):
        result = run('split', data_file, '-p', 'Ana:60', '-p', 'Luis:60')

        assert result.exit_code == 1
        assert 'Percentages must add up to 100%' in result.output
