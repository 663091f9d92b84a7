import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import click

from expense_core.container import Container
from expense_core.api.errors import APIError
from expense_core.models import Category, ChatResult, ChatSuccess, Expense, Participant
from expense_core.utils.date_utils import DateFormatter


def _load_data(path: str) -> Tuple[List[Expense], Dict[int, Category]]:
    """
    Read a JSON file of the form {"categories": [...], "expenses": [...]}
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    try:
        categories = [Category.from_map(c) for c in data.get('categories', [])]
        expenses = [Expense.from_firestore_map(e) for e in data.get('expenses', [])]
    except (KeyError, ValueError) as e:
        raise click.ClickException(f"Invalid data file {path}: {e}")
    return expenses, {c.id: c for c in categories if c.id is not None}


def _parse_month(value: Optional[str], expenses: List[Expense]) -> Tuple[int, int]:
    """YYYY-MM, defaulting to the month of the latest expense"""
    if value:
        try:
            parsed = datetime.strptime(value, '%Y-%m')
        except ValueError:
            raise click.BadParameter(f"expected YYYY-MM, got {value}", param_hint='--month')
        return parsed.year, parsed.month
    if expenses:
        latest = max(e.date for e in expenses)
        return latest.year, latest.month
    now = datetime.now()
    return now.year, now.month


def _echo_result(result: ChatResult) -> None:
    if isinstance(result, ChatSuccess):
        click.echo(result.text)
        click.echo(f"\n(model: {result.model})")
        return
    hint = " Try again in a moment." if result.retryable else ""
    raise click.ClickException(f"[{result.kind.value}] {result.message}.{hint}")


@click.group()
@click.pass_context
def cli(ctx):
    """Expense Assistant CLI"""
    if ctx.obj is None:
        ctx.obj = Container()
    ctx.obj.config().setup_logging()


@cli.command()
@click.option('--email', prompt=True, help='Account email')
@click.option('--password', prompt=True, hide_input=True, help='Account password')
@click.pass_obj
def login(container, email, password):
    """Sign in and store the session"""
    try:
        response = container.auth_provider().login(email, password)
    except APIError as e:
        raise click.ClickException(e.message)

    if not response.success:
        raise click.ClickException(response.message or 'Login failed')

    try:
        container.session_store().save(response.token, response.user, response.expires_at)
    except APIError as e:
        raise click.ClickException(e.message)

    click.echo(f"Signed in as {response.user.name or response.user.email}")
    click.echo(f"Session expires {response.expires_at:%Y-%m-%d %H:%M}")


@cli.command()
@click.pass_obj
def logout(container):
    """Sign out and clear the stored session"""
    try:
        container.auth_provider().logout()
    except APIError as e:
        click.echo(f"Warning: {e.message}", err=True)
    container.session_store().clear()
    click.echo("Signed out")


@cli.command()
@click.pass_obj
def whoami(container):
    """Show the stored session"""
    store = container.session_store()
    user = store.get_current_user() if store.is_logged_in() else None
    if user is None:
        click.echo("Not signed in")
        return
    expiry = store.get_token_expiry()
    click.echo(f"{user.name or user.email} <{user.email}> (id {user.id})")
    click.echo(f"Session expires {expiry:%Y-%m-%d %H:%M}")


@cli.command()
@click.argument('data_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--month', help='Month to analyze as YYYY-MM (default: latest month in the data)')
@click.pass_obj
def analyze(container, data_file, month=None):
    """Review a month's spending with AI recommendations"""
    expenses, categories = _load_data(data_file)
    year, month_number = _parse_month(month, expenses)

    analysis = container.analysis_service()
    report = analysis.monthly_report(expenses, year, month_number)
    if report is None:
        raise click.ClickException(f"No expenses in {year}-{month_number:02d}")
    click.echo(f"{report.month_name} {report.year}: ${report.total:.2f} across {report.expense_count} expenses")
    click.echo(f"Average expense: ${report.average_expense:.2f}")
    if report.change_percentage is not None:
        click.echo(report.change_text)
    top = categories.get(report.top_category_id)
    click.echo(f"Top category: {top.name if top else 'Other'} (${report.top_category_amount:.2f})")
    click.echo("")

    previous_year, previous_month = DateFormatter.previous_month(year, month_number)
    summary = analysis.spending_summary(
        analysis.expenses_in_month(expenses, year, month_number),
        analysis.expenses_in_month(expenses, previous_year, previous_month),
        categories
    )
    _echo_result(container.ai_service().analyze_summary(summary))


@cli.command()
@click.argument('data_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('question')
@click.pass_obj
def ask(container, data_file, question):
    """Ask a question about your expenses"""
    expenses, categories = _load_data(data_file)
    recent_first = sorted(expenses, key=lambda e: e.date, reverse=True)
    context = container.analysis_service().question_context(recent_first, categories)
    _echo_result(container.ai_service().ask_about_expenses(question, context))


@cli.command()
@click.argument('data_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--month', help='Last month of history as YYYY-MM (default: latest month in the data)')
@click.option('--months', default=3, show_default=True, help='Months of history to use')
@click.pass_obj
def forecast(container, data_file, month=None, months=3):
    """Project next month's spending"""
    expenses, categories = _load_data(data_file)
    year, month_number = _parse_month(month, expenses)
    totals, per_category = container.analysis_service().forecast_inputs(
        expenses, categories, year, month_number, months
    )
    _echo_result(container.ai_service().forecast_expenses(totals, per_category))


@cli.command()
@click.argument('data_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', 'fmt', type=click.Choice(['csv', 'pdf']), default='csv', show_default=True)
@click.option('--output', help='File name (default: expenses_<timestamp>.<format>)')
@click.option('--directory', help='Target directory (default: EXPORT_DIRECTORY)')
@click.option('--title', default='Expense Report', show_default=True, help='PDF report title')
@click.pass_obj
def export(container, data_file, fmt, output=None, directory=None, title='Expense Report'):
    """Export expenses to CSV or PDF"""
    expenses, categories = _load_data(data_file)
    exporter = container.export_service()

    data: Any
    if fmt == 'csv':
        data = exporter.to_csv(expenses, categories)
    else:
        dates = sorted(e.date for e in expenses)
        data = exporter.to_pdf(
            expenses,
            categories,
            title,
            start_date=dates[0] if dates else None,
            end_date=dates[-1] if dates else None
        )

    file_name = output or f"expenses_{datetime.now():%Y%m%d_%H%M%S}.{fmt}"
    path = exporter.save(data, file_name, directory)
    click.echo(f"Exported {len(expenses)} expenses to {path}")


def _name_value(value: str, option: str) -> Tuple[str, Optional[float]]:
    """NAME or NAME:NUMBER"""
    name, _, number = value.partition(':')
    if not name:
        raise click.BadParameter(f"missing name in {value}", param_hint=option)
    if not number:
        return name, None
    try:
        return name, float(number)
    except ValueError:
        raise click.BadParameter(f"expected NAME:NUMBER, got {value}", param_hint=option)


@cli.command()
@click.argument('data_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--participant', '-p', 'participants', multiple=True, required=True,
              help='NAME or NAME:PERCENT; without percentages the split is equal')
@click.option('--paid', multiple=True, help='NAME:AMOUNT already paid by a participant')
@click.option('--month', help='Only split expenses of this month, as YYYY-MM')
@click.option('--name', 'division_name', help='Division name (default: the month, or "Expenses")')
@click.pass_obj
def split(container, data_file, participants, paid, month=None, division_name=None):
    """Split expenses between people and show who pays whom"""
    expenses, _ = _load_data(data_file)
    if month:
        year, month_number = _parse_month(month, expenses)
        expenses = container.analysis_service().expenses_in_month(expenses, year, month_number)
        division_name = division_name or f"{year}-{month_number:02d}"

    shares = [_name_value(p, '--participant') for p in participants]
    divisions = container.division_service()
    if all(percentage is None for _, percentage in shares):
        people = divisions.equal_percentages([name for name, _ in shares])
    elif any(percentage is None for _, percentage in shares):
        raise click.BadParameter("give a percentage for every participant or for none", param_hint='--participant')
    else:
        people = [Participant(name=name, percentage=percentage) for name, percentage in shares]

    payments = {}
    for value in paid:
        name, amount = _name_value(value, '--paid')
        if amount is None:
            raise click.BadParameter(f"expected NAME:AMOUNT, got {value}", param_hint='--paid')
        payments[name] = payments.get(name, 0.0) + amount

    store = container.session_store()
    user = store.get_current_user() if store.is_logged_in() else None

    try:
        division = divisions.create_division(
            user.id if user else 0,
            division_name or 'Expenses',
            expenses,
            people
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(divisions.summary(division))
    if payments:
        settlements = divisions.settle(division, payments)
        if not settlements:
            click.echo("Nothing to settle")
        for settlement in settlements:
            click.echo(str(settlement))


if __name__ == '__main__':
    cli()
