"""Reconciliation between debt payment counters and the transaction history"""

from collections import defaultdict
from typing import Dict, Iterable, List
from debt_ledger.domain.models import (
    Debt,
    Transaction,
    ReconciliationIssue,
    ReconciliationReport,
)
from debt_ledger.domain.store import LedgerStore
from debt_ledger.domain.accounting import compute_aggregate_totals

COUNTER_BEHIND = "counter_behind"
DUPLICATE_PAYMENT = "duplicate_payment"
ORPHAN_PAYMENT = "orphan_payment"
COUNTER_OVERFLOW = "counter_overflow"


def find_payment_drift(debts: Iterable[Debt], transactions: Iterable[Transaction]) -> List[ReconciliationIssue]:
    """
    Compare debt counters against recorded payment transactions.

    Installments counted as paid when the debt was entered have no
    transaction, so a counter ahead of the ledger is not drift. Only the
    reverse (a recorded payment the counter does not reflect) is.
    """
    debts_by_id = {d.id: d for d in debts}
    payments: Dict[str, Dict[int, List[Transaction]]] = defaultdict(lambda: defaultdict(list))
    issues: List[ReconciliationIssue] = []

    for txn in transactions:
        if not txn.is_debt_payment:
            continue
        if txn.debt_id not in debts_by_id:
            issues.append(
                ReconciliationIssue(
                    kind=ORPHAN_PAYMENT,
                    debt_id=txn.debt_id,
                    detail=f"Payment for installment #{txn.installment_number} references a missing debt",
                    transaction_ids=[txn.id],
                )
            )
            continue
        payments[txn.debt_id][txn.installment_number].append(txn)

    for debt_id, debt in debts_by_id.items():
        if debt.paid_installments > debt.tenor:
            issues.append(
                ReconciliationIssue(
                    kind=COUNTER_OVERFLOW,
                    debt_id=debt_id,
                    detail=f"Paid installments {debt.paid_installments} exceed tenor {debt.tenor}",
                    expected_paid_installments=debt.tenor,
                )
            )

        by_number = payments.get(debt_id)
        if not by_number:
            continue

        for number, txns in sorted(by_number.items()):
            if len(txns) > 1:
                issues.append(
                    ReconciliationIssue(
                        kind=DUPLICATE_PAYMENT,
                        debt_id=debt_id,
                        detail=f"Installment #{number} was recorded {len(txns)} times",
                        transaction_ids=[t.id for t in txns],
                    )
                )

        highest = max(by_number)
        if highest > debt.paid_installments:
            uncounted = [t.id for n, txns in sorted(by_number.items()) if n > debt.paid_installments for t in txns]
            issues.append(
                ReconciliationIssue(
                    kind=COUNTER_BEHIND,
                    debt_id=debt_id,
                    detail=(
                        f"Installment #{highest} is recorded but only "
                        f"{debt.paid_installments} are counted as paid"
                    ),
                    expected_paid_installments=min(highest, debt.tenor),
                    transaction_ids=uncounted,
                )
            )

    return issues


def reconcile(store: LedgerStore, account_id: str, repair: bool = False) -> ReconciliationReport:
    """
    Detect (and optionally repair) drift for one account.

    Repair only moves counters: lagging counters are raised to the highest
    recorded installment, overflowing counters are clamped to the tenor.
    Duplicate and orphan payments are left for manual resolution.
    """
    debts = store.list_debts(account_id)
    transactions = store.list_transactions(account_id)
    issues = find_payment_drift(debts, transactions)

    repaired: List[str] = []
    if repair:
        with store.atomic():
            for issue in issues:
                if issue.kind not in (COUNTER_BEHIND, COUNTER_OVERFLOW):
                    continue
                store.update_debt(
                    account_id,
                    issue.debt_id,
                    {"paid_installments": issue.expected_paid_installments},
                )
                repaired.append(issue.debt_id)
        debts = store.list_debts(account_id)

    return ReconciliationReport(
        account_id=account_id,
        totals=compute_aggregate_totals(debts),
        issues=issues,
        repaired_debt_ids=repaired,
    )
