"""Installment schedule generation for debt display and audit"""

from typing import List
from debt_ledger.domain.models import Debt, ScheduleEntry
from debt_ledger.utils.date_utils import add_months


def build_installment_schedule(debt: Debt) -> List[ScheduleEntry]:
    """
    Expand a debt into its monthly installment schedule.

    Requirements:
    - Exactly `tenor` entries, numbered from 1
    - Entry n is scheduled at start_date + (n - 1) months, day clamped
      to the end of shorter months
    - The first `paid_installments` entries are marked paid

    Example:
        start 2024-01-31, tenor 3 -> 2024-01-31, 2024-02-29, 2024-03-31
    """
    return [
        ScheduleEntry(
            installment_number=i + 1,
            scheduled_date=add_months(debt.start_date, i),
            amount=debt.monthly_installment,
            paid=i + 1 <= debt.paid_installments,
        )
        for i in range(debt.tenor)
    ]
