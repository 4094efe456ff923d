import logging
from decimal import Decimal
from typing import Callable, Optional

from account_store import AccountStore
from ledger import TransactionLedger
from models import (
    ClientAccount,
    DisputeState,
    ProcessingResult,
    RejectionReason,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the account store, one record at a time.
    Returns a ProcessingResult for every record; rejections leave both the
    accounts and the ledger untouched.
    """

    def __init__(self, accounts: AccountStore, ledger: TransactionLedger):
        self._accounts = accounts
        self._ledger = ledger

    def process(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            ProcessingResult with reason None when applied, otherwise the
            RejectionReason explaining why the record was ignored.
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._handle_deposit(transaction)
            case TransactionType.WITHDRAW:
                return self._handle_withdraw(transaction)
            case TransactionType.DISPUTE:
                return self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                return self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(transaction)
            case _:
                raise ValueError(f"Unsupported transaction type: {transaction.transaction_type}")

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_amount(transaction)
        if rejection:
            return rejection

        amount = transaction.amount
        reason = self._accounts.apply_if_unlocked(
            transaction.client_id, lambda account: account.credit(amount)
        )
        if reason:
            return self._reject(transaction, reason, f"deposit of {amount} refused")

        self._ledger.record(self._ledger_entry(transaction))
        return ProcessingResult.success(transaction)

    def _handle_withdraw(self, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_amount(transaction)
        if rejection:
            return rejection

        amount = transaction.amount
        reason = self._accounts.apply_if_unlocked(
            transaction.client_id, lambda account: account.debit(amount)
        )
        if reason == RejectionReason.INSUFFICIENT_FUNDS:
            available = self._accounts.get(transaction.client_id).available
            return self._reject(transaction, reason, f"withdrawal of {amount} exceeds available {available}")
        if reason:
            return self._reject(transaction, reason, f"withdrawal of {amount} refused")

        self._ledger.record(self._ledger_entry(transaction))
        return ProcessingResult.success(transaction)

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._find_original(transaction, DisputeState.UNDISPUTED)
        if rejection:
            return rejection

        amount = original.amount
        if original.transaction_type == TransactionType.DEPOSIT:
            def mutation(account: ClientAccount) -> None:
                account.hold(amount)
        else:
            def mutation(account: ClientAccount) -> None:
                account.reclaim(amount)

        return self._settle(transaction, original, mutation, DisputeState.DISPUTED)

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._find_original(transaction, DisputeState.DISPUTED)
        if rejection:
            return rejection

        amount = original.amount
        if original.transaction_type == TransactionType.DEPOSIT:
            def mutation(account: ClientAccount) -> None:
                account.release_hold(amount)
        else:
            def mutation(account: ClientAccount) -> None:
                account.remove_held(amount)

        return self._settle(transaction, original, mutation, DisputeState.RESOLVED)

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        original, rejection = self._find_original(transaction, DisputeState.DISPUTED)
        if rejection:
            return rejection

        amount = original.amount
        if original.transaction_type == TransactionType.DEPOSIT:
            def mutation(account: ClientAccount) -> None:
                account.remove_held(amount)
                account.lock()
        else:
            def mutation(account: ClientAccount) -> None:
                account.release_hold(amount)
                account.lock()

        return self._settle(transaction, original, mutation, DisputeState.CHARGED_BACK)

    def _find_original(self, transaction: Transaction, expected_state: DisputeState):
        """Look up the disputed transaction and check it may move out of expected_state."""
        original = self._ledger.lookup(transaction.transaction_id)
        action = transaction.transaction_type.value

        if original is None:
            return None, self._reject(
                transaction,
                RejectionReason.UNKNOWN_TRANSACTION,
                f"{action} references unknown tx {transaction.transaction_id}",
            )

        if original.client_id != transaction.client_id:
            return None, self._reject(
                transaction,
                RejectionReason.CLIENT_MISMATCH,
                f"{action} from client {transaction.client_id} targets tx owned by client {original.client_id}",
            )

        if original.dispute_state != expected_state:
            return None, self._reject(
                transaction,
                RejectionReason.ALREADY_DISPUTED,
                f"{action} needs tx in state {expected_state.value}, found {original.dispute_state.value}",
            )

        return original, None

    def _settle(
        self,
        transaction: Transaction,
        original: Transaction,
        mutation: Callable[[ClientAccount], None],
        new_state: DisputeState,
    ) -> ProcessingResult:
        action = transaction.transaction_type.value
        reason = self._accounts.apply_if_unlocked(transaction.client_id, mutation)
        if reason == RejectionReason.INSUFFICIENT_FUNDS:
            return self._reject(
                transaction, reason, f"{action} cannot hold {original.amount}, available funds too low"
            )
        if reason:
            return self._reject(transaction, reason, f"{action} refused")

        original.advance_dispute(new_state)
        logger.debug(f"Tx {original.transaction_id}: dispute state now {new_state.value}")
        return ProcessingResult.success(transaction)

    def _check_amount(self, transaction: Transaction) -> Optional[ProcessingResult]:
        if transaction.amount is None or transaction.amount < 0:
            return self._reject(
                transaction,
                RejectionReason.INVALID_AMOUNT,
                f"{transaction.transaction_type.value} has invalid amount {transaction.amount}",
            )
        return None

    @staticmethod
    def _ledger_entry(transaction: Transaction) -> Transaction:
        return Transaction(
            transaction_type=transaction.transaction_type,
            client_id=transaction.client_id,
            transaction_id=transaction.transaction_id,
            amount=Decimal(transaction.amount),
        )

    @staticmethod
    def _reject(transaction: Transaction, reason: RejectionReason, detail: str) -> ProcessingResult:
        logger.debug(f"Tx {transaction.transaction_id}: rejected ({reason.value}) {detail}")
        return ProcessingResult.rejected(transaction, reason, detail)
