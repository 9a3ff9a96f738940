"""
Finance bookkeeping helpers - balances and the transactions that mirror loans
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Tuple

LOAN_CATEGORY = "Loan"
REPAYMENT_CATEGORY = "Loan repayment"


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_balances(
    accounts: Iterable[Dict[str, Any]],
    totals: Iterable[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    """
    Attach current_balance to every account.

    Args:
        accounts: rows of the accounts table
        totals: rows of (account_id, transaction_type, total) sums

    Income adds to the initial balance; every other type subtracts.
    """
    movement: Dict[Any, Decimal] = {}
    for row in totals:
        amount = to_decimal(row["total"])
        if row["transaction_type"] != "income":
            amount = -amount
        movement[row["account_id"]] = movement.get(row["account_id"], Decimal("0")) + amount

    result = []
    for account in accounts:
        balance = to_decimal(account["initial_balance"]) + movement.get(account["id"], Decimal("0"))
        result.append({**account, "current_balance": float(balance)})
    return result


def loan_transaction(loan_type: str, person_name: str) -> Tuple[str, str, str]:
    """
    The account movement created together with a loan

    Returns:
        (transaction_type, category, notes)
    """
    if loan_type == "lend":
        return "expense", LOAN_CATEGORY, f"Lent to {person_name}"
    return "income", LOAN_CATEGORY, f"Borrowed from {person_name}"


def repayment_transaction(loan_type: str, person_name: str) -> Tuple[str, str, str]:
    """The account movement created by a repayment; the reverse of the loan's"""
    if loan_type == "lend":
        return "income", REPAYMENT_CATEGORY, f"Repayment received from {person_name}"
    return "expense", REPAYMENT_CATEGORY, f"Repayment to {person_name}"


def remaining_principal(loan_amount: Any, total_repaid: Any) -> Decimal:
    return to_decimal(loan_amount) - to_decimal(total_repaid)
