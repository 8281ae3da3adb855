"""Running-balance ledger for a single customer.

Everything here is a pure function of its arguments: no session, no I/O.
The same credit-minus-debit fold backs ``build_ledger`` (for display),
``recompute_balance`` (for reconciliation) and ``verify_balance_snapshots``
(for auditing the ``balance_after`` values stored at write time).
"""

from collections.abc import Iterable, Sequence
from decimal import Decimal

from moneyview.core.dates import as_utc
from moneyview.core.money import ZERO, to_money
from moneyview.ledger.models import TransactionType
from moneyview.ledger.schemas import LedgerEntry

OPENING_TRANSACTION_ID = "opening"
OPENING_DESCRIPTION = "Opening Balance"


def signed_amount(transaction_type: TransactionType | str, amount: Decimal) -> Decimal:
    """Effect of one transaction on the customer's balance."""
    amount = to_money(amount)
    if TransactionType(transaction_type) == TransactionType.CREDIT:
        return amount
    return -amount


def chronological(transactions: Iterable) -> list:
    """Ascending by effective date.

    ``sorted`` is stable, so transactions sharing an instant keep the order
    they were fetched in.
    """
    return sorted(transactions, key=lambda t: as_utc(t.date))


def _replay(opening_balance: Decimal, transactions: Sequence):
    running = to_money(opening_balance)
    for transaction in chronological(transactions):
        running += signed_amount(transaction.type, transaction.amount)
        yield transaction, running


def build_ledger(customer, transactions: Iterable) -> list[LedgerEntry]:
    """Chronological ledger with a running balance.

    ``customer`` needs ``opening_balance`` and ``created_at``; each
    transaction needs ``id``, ``type``, ``amount``, ``date`` and
    ``description``. A non-zero opening balance produces a leading
    synthetic row dated at ``customer.created_at``.
    """
    opening = to_money(customer.opening_balance)
    entries: list[LedgerEntry] = []

    if opening != ZERO:
        entries.append(
            LedgerEntry(
                date=customer.created_at,
                description=OPENING_DESCRIPTION,
                credit=max(opening, ZERO),
                debit=max(-opening, ZERO),
                balance=opening,
                transaction_id=OPENING_TRANSACTION_ID,
            )
        )

    for transaction, running in _replay(opening, list(transactions)):
        transaction_type = TransactionType(transaction.type)
        amount = to_money(transaction.amount)
        entries.append(
            LedgerEntry(
                date=transaction.date,
                description=transaction.description
                or f"{transaction_type.value} transaction",
                credit=amount if transaction_type == TransactionType.CREDIT else ZERO,
                debit=amount if transaction_type == TransactionType.DEBIT else ZERO,
                balance=running,
                transaction_id=str(transaction.id),
            )
        )

    return entries


def recompute_balance(customer, transactions: Iterable) -> Decimal:
    balance = to_money(customer.opening_balance)
    for transaction in transactions:
        balance += signed_amount(transaction.type, transaction.amount)
    return balance


def verify_balance_snapshots(customer, transactions: Iterable) -> list[str]:
    """Ids of transactions whose stored ``balance_after`` disagrees with the replay.

    Back-dated transactions are the usual cause: their snapshot was taken
    against the balance at write time, not at their effective date.
    """
    return [
        str(transaction.id)
        for transaction, running in _replay(customer.opening_balance, list(transactions))
        if to_money(transaction.balance_after) != running
    ]
