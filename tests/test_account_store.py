import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from account_store import AccountStore
from models import RejectionReason


class TestAccountStore:
    def setup_method(self):
        self.store = AccountStore()

    def test_get_or_create_is_lazy_and_stable(self):
        assert self.store.get(1) is None
        account = self.store.get_or_create(1)
        assert account.total == Decimal("0")
        assert self.store.get_or_create(1) is account
        assert len(self.store.snapshot()) == 1

    def test_get_does_not_create(self):
        assert self.store.get(5) is None
        assert self.store.snapshot() == []

    def test_apply_mutation(self):
        reason = self.store.apply_if_unlocked(1, lambda account: account.credit(Decimal("10")))
        assert reason is None
        assert self.store.get(1).available == Decimal("10")

    def test_apply_rejects_locked_without_calling_mutation(self):
        self.store.get_or_create(1).lock()
        calls = []

        reason = self.store.apply_if_unlocked(1, calls.append)

        assert reason == RejectionReason.ACCOUNT_LOCKED
        assert calls == []

    def test_negative_available_rolls_back(self):
        self.store.apply_if_unlocked(1, lambda account: account.credit(Decimal("10")))

        def overdraw_and_lock(account):
            account.hold(Decimal("25"))
            account.lock()

        reason = self.store.apply_if_unlocked(1, overdraw_and_lock)

        account = self.store.get(1)
        assert reason == RejectionReason.INSUFFICIENT_FUNDS
        assert account.available == Decimal("10")
        assert account.held == Decimal("0")
        assert account.locked is False

    def test_snapshot_in_first_reference_order(self):
        for client_id in (3, 1, 2):
            self.store.get_or_create(client_id)
        self.store.get_or_create(1)

        snapshot = self.store.snapshot()
        assert [account.client_id for account in snapshot] == [3, 1, 2]

    def test_snapshot_is_detached(self):
        self.store.apply_if_unlocked(1, lambda account: account.credit(Decimal("10")))
        snapshot = self.store.snapshot()
        snapshot[0].credit(Decimal("5"))
        assert self.store.get(1).available == Decimal("10")

    def test_rounded_balance_rolls_back(self):
        huge = Decimal("999999999999999999999999.9999")
        self.store.apply_if_unlocked(1, lambda account: account.credit(huge))

        reason = self.store.apply_if_unlocked(1, lambda account: account.credit(huge))

        assert reason == RejectionReason.BALANCE_OVERFLOW
        assert self.store.get(1).available == huge

    def test_rounded_total_rolls_back(self):
        huge = Decimal("999999999999999999999999.9999")
        self.store.apply_if_unlocked(1, lambda account: account.credit(huge))
        self.store.apply_if_unlocked(1, lambda account: account.hold(huge))

        reason = self.store.apply_if_unlocked(1, lambda account: account.credit(huge))

        account = self.store.get(1)
        assert reason == RejectionReason.BALANCE_OVERFLOW
        assert (account.available, account.held) == (Decimal("0"), huge)
