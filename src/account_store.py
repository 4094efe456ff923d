from dataclasses import replace
from decimal import Inexact, localcontext
from typing import Callable, Dict, List, Optional

from models import ClientAccount, RejectionReason


class AccountStore:
    """
    Client accounts keyed by client ID, created lazily on first reference.
    Mutations go through apply_if_unlocked so a rejected change never leaves
    an account half-updated.
    """

    def __init__(self):
        # dicts keep insertion order, which is the snapshot order
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def apply_if_unlocked(
        self, client_id: int, mutation: Callable[[ClientAccount], None]
    ) -> Optional[RejectionReason]:
        """
        Run mutation against the account unless it is locked.

        Returns:
            None: mutation applied
            ACCOUNT_LOCKED: account is frozen, mutation not invoked
            INSUFFICIENT_FUNDS: mutation drove available below zero and was rolled back
            BALANCE_OVERFLOW: a balance no longer fits the decimal context exactly, rolled back
        """
        account = self.get_or_create(client_id)
        if account.locked:
            return RejectionReason.ACCOUNT_LOCKED

        before = replace(account)
        reason = None
        with localcontext() as ctx:
            # any rounding of a balance is an error, not a silent change
            ctx.traps[Inexact] = True
            try:
                mutation(account)
                # total is derived on read, it has to fit as well
                account.total
            except Inexact:
                reason = RejectionReason.BALANCE_OVERFLOW

        if reason is None and account.available < 0:
            reason = RejectionReason.INSUFFICIENT_FUNDS

        if reason:
            account.available = before.available
            account.held = before.held
            account.locked = before.locked
        return reason

    def snapshot(self) -> List[ClientAccount]:
        """Return copies of all accounts in first-reference order."""
        return [replace(account) for account in self._accounts.values()]
