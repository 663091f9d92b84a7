"""
AI service for expense analysis.

This module builds the analysis, question and forecast prompts from
expense data and sends them through the model fallback client.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence

from ..api.model_fallback_client import ModelFallbackClient
from ..models.chat import ChatResult
from ..models.report import SpendingSummary
from ..prompts import (
    DEFAULT_LANGUAGE,
    ExpenseAnalysisPrompt,
    ExpenseQuestionPrompt,
    ExpenseForecastPrompt
)

logger = logging.getLogger(__name__)


class AIService:
    """
    Service for AI-assisted expense analysis.

    Every method is a prompt builder over `ModelFallbackClient.send` and
    returns its ChatResult unchanged.
    """

    def __init__(self,
                 fallback_client: ModelFallbackClient,
                 language: str = DEFAULT_LANGUAGE):
        """
        Initialize the AI service.

        Args:
            fallback_client: Client that walks the model chain
            language: Language the answers should be written in
        """
        self.fallback_client = fallback_client
        self.analysis_prompt = ExpenseAnalysisPrompt(language=language)
        self.question_prompt = ExpenseQuestionPrompt(language=language)
        self.forecast_prompt = ExpenseForecastPrompt(language=language)

    def send_message(self, user_message: str, system_prompt: str) -> ChatResult:
        """Send a raw prompt through the model chain"""
        return self.fallback_client.send(system_prompt=system_prompt, user_message=user_message)

    def analyze_expenses(self,
                         total_spent: float,
                         by_category: Mapping[str, float],
                         trends: Mapping[str, str],
                         credit_card_debt: float) -> ChatResult:
        """
        Review spending and recommend improvements.

        Args:
            total_spent: Total spent in the period
            by_category: Spending by category name
            trends: Change vs the previous month by category (e.g. "+12.5%")
            credit_card_debt: Unpaid credit card installments

        Returns:
            ChatResult: The model's review
        """
        logger.info(f"Analyzing expenses: total={total_spent:.2f}, categories={len(by_category)}")
        return self.fallback_client.send(**self.analysis_prompt.build(
            total_spent=total_spent,
            by_category=by_category,
            trends=trends,
            credit_card_debt=credit_card_debt
        ))

    def analyze_summary(self, summary: SpendingSummary) -> ChatResult:
        """Review spending from a precomputed summary"""
        return self.analyze_expenses(
            total_spent=summary.total_spent,
            by_category=summary.by_category,
            trends=summary.trends,
            credit_card_debt=summary.credit_card_debt
        )

    def ask_about_expenses(self, question: str, context: Dict[str, Any]) -> ChatResult:
        """
        Answer a question about the user's expenses.

        Args:
            question: The user's question
            context: Expense data the answer should be based on

        Returns:
            ChatResult: The model's answer
        """
        logger.info("Answering question about expenses")
        return self.fallback_client.send(**self.question_prompt.build(question=question, context=context))

    def forecast_expenses(self,
                          last_months_totals: Sequence[float],
                          categories_trend: Mapping[str, List[float]]) -> ChatResult:
        """
        Project next month's spending.

        Args:
            last_months_totals: Monthly totals, oldest first
            categories_trend: Monthly totals per category, oldest first

        Returns:
            ChatResult: The model's projection
        """
        logger.info(f"Forecasting expenses from {len(last_months_totals)} months")
        return self.fallback_client.send(**self.forecast_prompt.build(
            last_months_totals=last_months_totals,
            categories_trend=categories_trend
        ))
