"""
Expense division service.

Splits a set of expenses between participants by percentage and works out
who pays whom to settle the split.
"""

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..models.division import ExpenseDivision, Participant, Settlement
from ..models.expense import Expense

logger = logging.getLogger(__name__)

# Percentages and balances closer than this are treated as equal
TOLERANCE = 0.01

COMMON_FRACTIONS = (
    (50.0, '1/2'),
    (33.33, '1/3'),
    (25.0, '1/4'),
    (20.0, '1/5'),
    (16.67, '1/6'),
    (14.29, '1/7'),
    (12.5, '1/8'),
    (11.11, '1/9'),
    (10.0, '1/10'),
)


class DivisionService:
    """Service for splitting expenses between participants"""

    def calculate_total(self, expenses: Sequence[Expense]) -> float:
        return sum(e.amount for e in expenses)

    def validate_percentages(self, participants: Sequence[Participant]) -> Tuple[bool, Optional[str]]:
        """
        Check that no share is negative and that the shares add up to 100.

        Returns:
            Tuple[bool, Optional[str]]: (valid, error message when invalid)
        """
        for participant in participants:
            if participant.percentage < 0:
                return False, f"{participant.name} has a negative percentage"

        total = sum(p.percentage for p in participants)
        if abs(total - 100) > TOLERANCE:
            return False, f"Percentages must add up to 100% (currently {total:.2f}%)"
        return True, None

    def calculate_participant_amounts(self,
                                      total_amount: float,
                                      participants: Sequence[Participant]) -> List[Participant]:
        """
        Work out each participant's share of the total, rounded to cents.

        Shares that do not add up to 100% are still applied, with a warning.
        """
        total_percentage = sum(p.percentage for p in participants)
        if abs(total_percentage - 100) > TOLERANCE:
            logger.warning(f"Percentages add up to {total_percentage}%, not 100%")

        return [
            p.model_copy(update={'amount_owed': round(total_amount * p.percentage / 100, 2)})
            for p in participants
        ]

    def equal_percentages(self, names: Sequence[str], division_id: int = 0) -> List[Participant]:
        """
        Participants with the same percentage each, rounded to two decimals.

        The last participant takes the rounding remainder so the shares
        still add up to 100.
        """
        if not names:
            return []
        percentage = round(100.0 / len(names), 2)
        percentages = [percentage] * (len(names) - 1)
        percentages.append(round(100.0 - percentage * (len(names) - 1), 2))
        return [
            Participant(division_id=division_id, name=name, percentage=share)
            for name, share in zip(names, percentages)
        ]

    def create_division(self,
                        user_id: int,
                        name: str,
                        expenses: Sequence[Expense],
                        participants: Sequence[Participant],
                        created_at: Optional[datetime] = None) -> ExpenseDivision:
        """
        Split the given expenses between participants.

        Raises:
            ValueError: If the percentages are invalid
        """
        valid, error = self.validate_percentages(participants)
        if not valid:
            raise ValueError(error)

        total = self.calculate_total(expenses)
        division = ExpenseDivision(
            user_id=user_id,
            name=name,
            created_at=created_at or datetime.now(),
            total_amount=total,
            expense_ids=[e.id for e in expenses if e.id is not None],
            participants=self.calculate_participant_amounts(total, participants)
        )
        logger.info(f"Division '{name}': ${total:.2f} between {len(participants)} participants")
        return division

    def settle(self, division: ExpenseDivision, payments: Mapping[str, float]) -> List[Settlement]:
        """
        Transfers that settle a division given what each participant paid.

        Each debtor, in participant order, pays creditors in participant
        order until their debt is covered.

        Args:
            division: Division with amounts owed
            payments: Amount actually paid by participant name; missing is 0

        Returns:
            List[Settlement]: Transfers, amounts rounded to cents
        """
        balances: Dict[str, float] = {}
        for participant in division.participants:
            balances[participant.name] = payments.get(participant.name, 0.0) - participant.amount_owed

        credits = {name: balance for name, balance in balances.items() if balance > 0}
        settlements = []
        for debtor, balance in balances.items():
            if balance >= 0:
                continue
            debt = -balance
            for creditor in credits:
                if debt <= TOLERANCE:
                    break
                credit = credits[creditor]
                if credit <= TOLERANCE:
                    continue
                amount = min(debt, credit)
                settlements.append(Settlement(debtor=debtor, creditor=creditor, amount=round(amount, 2)))
                debt -= amount
                credits[creditor] = credit - amount
        return settlements

    def summary(self, division: ExpenseDivision) -> str:
        lines = [
            f"Division: {division.name}",
            f"Date: {division.created_at:%Y-%m-%d %H:%M:%S}",
            f"Total: ${division.total_amount:.2f}",
            "",
            "Participants:",
        ]
        for p in division.participants:
            lines.append(f"  - {p.name}: ${p.amount_owed:.2f} ({p.percentage:.1f}%)")
        return "\n".join(lines) + "\n"

    @staticmethod
    def percentage_to_fraction(percentage: float) -> str:
        """Show common shares as fractions: 50 -> '1/2', 33.33 -> '1/3'"""
        for value, fraction in COMMON_FRACTIONS:
            if abs(value - percentage) < 0.5:
                return fraction
        return f"{percentage:.1f}%"
