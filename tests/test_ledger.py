import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ledger import TransactionLedger
from models import Transaction, TransactionType


def make_deposit(client_id: int, transaction_id: int, amount: str = "100") -> Transaction:
    return Transaction(
        transaction_type=TransactionType.DEPOSIT,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=Decimal(amount),
    )


class TestTransactionLedger:
    def test_record_and_lookup(self):
        ledger = TransactionLedger()
        deposit = make_deposit(1, 1)
        ledger.record(deposit)
        assert ledger.lookup(1) is deposit
        assert ledger.lookup(1) is not None
        assert len(ledger) == 1

    def test_lookup_missing_returns_none(self):
        ledger = TransactionLedger()
        assert ledger.lookup(42) is None
        assert len(ledger) == 0

    def test_duplicate_id_first_wins(self):
        ledger = TransactionLedger()
        first = make_deposit(1, 7, "10")
        second = make_deposit(2, 7, "20")
        ledger.record(first)
        ledger.record(second)

        assert ledger.lookup(7) is first
        assert len(ledger) == 2

