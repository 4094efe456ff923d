from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeState(Enum):
    UNDISPUTED = "undisputed"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


_DISPUTE_TRANSITIONS = {
    DisputeState.UNDISPUTED: {DisputeState.DISPUTED},
    DisputeState.DISPUTED: {DisputeState.RESOLVED, DisputeState.CHARGED_BACK},
    DisputeState.RESOLVED: set(),
    DisputeState.CHARGED_BACK: set(),
}


class RejectionReason(Enum):
    ACCOUNT_LOCKED = "account_locked"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    ALREADY_DISPUTED = "already_disputed"
    INVALID_AMOUNT = "invalid_amount"
    BALANCE_OVERFLOW = "balance_overflow"


class MalformedInputError(Exception):
    """Raised by the record source when a line cannot be turned into a Transaction."""

    def __init__(self, line_number: int, message: str):
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number
        self.message = message


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None
    dispute_state: DisputeState = DisputeState.UNDISPUTED

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"

    def advance_dispute(self, new_state: DisputeState) -> None:
        """Move the dispute lifecycle forward, refusing any skip or regression."""
        if new_state not in _DISPUTE_TRANSITIONS[self.dispute_state]:
            raise ValueError(
                f"tx {self.transaction_id}: cannot move from {self.dispute_state.value} to {new_state.value}"
            )
        self.dispute_state = new_state


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def reclaim(self, amount: Decimal) -> None:
        # funds already left via withdrawal; total grows with the hold
        self.held += amount

    def lock(self) -> None:
        self.locked = True


@dataclass
class ProcessingResult:
    """Outcome of applying one record: accepted, or rejected with a reason."""

    transaction: Transaction
    reason: Optional[RejectionReason] = None
    detail: str = ""

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def success(cls, transaction: Transaction) -> "ProcessingResult":
        return cls(transaction=transaction)

    @classmethod
    def rejected(cls, transaction: Transaction, reason: RejectionReason, detail: str) -> "ProcessingResult":
        return cls(transaction=transaction, reason=reason, detail=detail)


@dataclass
class ProcessingStats:
    """Counters for tracking processing statistics."""

    processed: int = 0
    rejected: int = 0
    by_reason: Counter = field(default_factory=Counter)

    def record(self, result: ProcessingResult) -> None:
        if result.accepted:
            self.processed += 1
        else:
            self.rejected += 1
            self.by_reason[result.reason] += 1
