import logging
from typing import Dict, List, Optional

from models import Transaction

logger = logging.getLogger(__name__)


class TransactionLedger:
    """
    Append-only store of accepted deposits and withdrawals.
    Indexed by transaction ID for dispute lookups. When an ID repeats, the
    first entry stays addressable and later ones are only kept in history.
    """

    def __init__(self):
        self._transactions: Dict[int, Transaction] = {}
        self._history: List[Transaction] = []

    def record(self, transaction: Transaction) -> None:
        """Store transaction for future dispute lookups."""
        self._history.append(transaction)
        if transaction.transaction_id in self._transactions:
            logger.info(f"Tx {transaction.transaction_id}: duplicate id, earlier entry stays addressable")
            return
        self._transactions[transaction.transaction_id] = transaction

    def lookup(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def __len__(self) -> int:
        return len(self._history)
