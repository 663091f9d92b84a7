"""
Expense prompt templates.

This module provides the prompts for reviewing spending, answering
questions about expenses and forecasting next month's spending.
"""

import json
from typing import Any, Dict, List, Mapping, Sequence

from .base_prompts import BasePrompt, FRIENDLY_TONE_RULES, format_bullets, format_money


class ExpenseAnalysisPrompt(BasePrompt):
    """Friendly review of a period's spending with recommendations"""

    system_message = f"""You are a very friendly and empathetic expert in personal finance and expense analysis.
Your task is to analyze the user's expenses and give clear, concise and friendly recommendations.

{FRIENDLY_TONE_RULES}

TONE EXAMPLE:
Wrong: "A 25% increase was detected in category X"
Right: "I see your spending on X went up 25% this month - did something special happen?"

TONE EXAMPLE:
Wrong: "The user should reduce their purchases"
Right: "You could save quite a bit if you cut back a little on X\""""

    def build_user_message(self,
                           total_spent: float,
                           by_category: Mapping[str, float],
                           trends: Mapping[str, str],
                           credit_card_debt: float) -> str:
        categories = format_bullets(f"{name}: {format_money(amount)}" for name, amount in by_category.items())
        if trends:
            trend_lines = format_bullets(f"{name}: {change}" for name, change in trends.items())
        else:
            trend_lines = "(This is my first month of data)"

        return f"""Analyze my expenses for the last period and give me friendly recommendations:

Total I spent: {format_money(total_spent)}
My credit card debt: {format_money(credit_card_debt)}

How I spent my money:
{categories}

How this changed vs the previous month:
{trend_lines}

Please:
1. A friendly summary of my main expenses (what matters most)
2. What is going well in my finances (be positive)
3. 1-2 realistic things I could improve
4. If I have debt, one practical tip to pay it off
5. A positive reflection on my spending habits

Talk to me directly. Be kind and understanding, not critical. Make it conversational!"""


class ExpenseQuestionPrompt(BasePrompt):
    """Answer a free-form question using the user's expense data"""

    system_message = f"""You are a friendly and empathetic personal finance assistant.
Answer questions about expenses clearly, concisely and helpfully.
Base your answers on the data context provided.
Use specific numbers whenever possible.

{FRIENDLY_TONE_RULES}"""

    def build_user_message(self, question: str, context: Dict[str, Any]) -> str:
        context_str = json.dumps(context, ensure_ascii=False, default=str)
        return f"""My expense information:
{context_str}

My question: {question}

Please answer me directly, in a friendly and helpful way. Be concise."""


class ExpenseForecastPrompt(BasePrompt):
    """Project next month's spending from recent history"""

    system_message = """You are an expert in data analysis and financial projections.
Your task is to analyze spending trends and identify realistic projections.
Be specific with numbers and percentages."""

    @staticmethod
    def average(values: Sequence[float]) -> float:
        return sum(values) / len(values) if values else 0.0

    def build_user_message(self,
                           last_months_totals: Sequence[float],
                           categories_trend: Mapping[str, List[float]]) -> str:
        totals = ", ".join(format_money(v) for v in last_months_totals)
        category_lines = format_bullets(
            f"{name}: {', '.join(format_money(v) for v in values)}"
            for name, values in categories_trend.items()
        )

        return f"""Based on the following spending history, project my expenses for next month:

Last {len(last_months_totals)} months (totals): {totals}
Average: {format_money(self.average(last_months_totals))}

Trends by category:
{category_lines}

Please:
1. Project next month's total spending
2. Project spending for each main category
3. Identify the categories with the most variability
4. Suggest a realistic budget"""
