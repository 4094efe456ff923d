import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from account_store import AccountStore
from csv_reader import read_transactions
from ledger import TransactionLedger
from models import ClientAccount, ProcessingResult, ProcessingStats, Transaction
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    accounts: Dict[int, ClientAccount]
    rejections: List[ProcessingResult] = field(default_factory=list)
    stats: ProcessingStats = field(default_factory=ProcessingStats)


class PaymentsEngine:
    """
    Replays transaction records against fresh account state.
    Each run owns its own ledger and account store; nothing survives between runs.
    """

    def __init__(self, amount_precision: int = 4):
        self._amount_precision = amount_precision

    def process_file(self, filepath: str) -> RunReport:
        """Process CSV file and return final account states."""
        # MalformedInputError escapes here, before any record is applied
        transactions = read_transactions(filepath, self._amount_precision)
        return self.process_transactions(transactions)

    def process_transactions(self, transactions: Iterable[Transaction]) -> RunReport:
        accounts = AccountStore()
        ledger = TransactionLedger()
        processor = TransactionProcessor(accounts, ledger)
        report = RunReport(accounts={})

        logger.info("Starting processing run")

        for transaction in transactions:
            result = processor.process(transaction)
            report.stats.record(result)
            if not result.accepted:
                report.rejections.append(result)
                logger.warning(
                    f"Rejected {transaction}: {result.reason.value} ({result.detail})",
                    extra={
                        "client_id": transaction.client_id,
                        "transaction_id": transaction.transaction_id,
                        "reason": result.reason.value,
                    },
                )

        report.accounts = {account.client_id: account for account in accounts.snapshot()}

        logger.info(
            f"Processed: {report.stats.processed}, "
            f"Rejected: {report.stats.rejected}, "
            f"Accounts: {len(report.accounts)}, "
            f"Ledger entries: {len(ledger)}"
        )
        return report
