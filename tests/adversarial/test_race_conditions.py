"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent operations on the same account are handled
atomically, preventing attackers from:
- Registering the same email twice
- Consuming one verification artifact more than once
- Restoring one deleted account more than once
- Observing a half-applied moderation transition

Atomic SQL (ON CONFLICT on the live-email index, single-statement
UPDATE ... RETURNING) is the defense under test.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest
from psycopg_pool import ConnectionPool

from dlibrary.adapters.repository import PostgresAccountRepository
from dlibrary.domain.account import Account, AccountStatus

pytestmark = [pytest.mark.adversarial, pytest.mark.usefixtures("clean_database")]

NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)
LATER = NOW + timedelta(hours=24)
NUM_ATTACKERS = 8


def new_account(email: str = "attack@example.com") -> Account:
    return Account(email=email, password_hash="$2b$04$x", name="Attacker", created_at=NOW)


def run_concurrently(fn, count: int = NUM_ATTACKERS) -> list:
    barrier = threading.Barrier(count)

    def attack(_: int):
        barrier.wait()
        return fn()

    with ThreadPoolExecutor(max_workers=count) as executor:
        return list(executor.map(attack, range(count)))


class TestRaceConditionAttacks:
    def test_concurrent_registration_exactly_one_succeeds(self, pool: ConnectionPool) -> None:
        """ON CONFLICT on the live-email index admits exactly one insert."""
        repository = PostgresAccountRepository(pool)

        results = run_concurrently(lambda: repository.add(new_account()))

        assert results.count(True) == 1
        assert len(repository.list_accounts(include_deleted=True)) == 1

    def test_concurrent_token_consumption_single_winner(self, pool: ConnectionPool) -> None:
        repository = PostgresAccountRepository(pool)
        account = new_account()
        repository.add(account)
        repository.store_verification(account.id, "tok", LATER, "123456", LATER)

        results = run_concurrently(lambda: repository.consume_token("tok", NOW))

        assert sum(1 for r in results if r is not None) == 1

    def test_concurrent_code_consumption_single_winner(self, pool: ConnectionPool) -> None:
        repository = PostgresAccountRepository(pool)
        account = new_account()
        repository.add(account)
        repository.store_verification(account.id, "tok", LATER, "123456", LATER)

        results = run_concurrently(
            lambda: repository.consume_code("attack@example.com", "123456", NOW)
        )

        assert sum(1 for r in results if r is not None) == 1

    def test_concurrent_moderation_leaves_consistent_state(self, pool: ConnectionPool) -> None:
        """Ban and suspend racing never mix: BANNED has no suspended_until."""
        repository = PostgresAccountRepository(pool)
        account = new_account()
        repository.add(account)
        changes = [
            {"status": AccountStatus.BANNED, "suspended_until": None},
            {"status": AccountStatus.SUSPENDED, "suspended_until": LATER},
        ]
        counter = iter(range(NUM_ATTACKERS))
        lock = threading.Lock()

        def moderate():
            with lock:
                index = next(counter)
            return repository.update(account.id, changes[index % 2])

        run_concurrently(moderate)

        final = repository.get(account.id)
        if final.status == AccountStatus.BANNED:
            assert final.suspended_until is None
        else:
            assert final.suspended_until == LATER

    def test_concurrent_restore_single_winner(self, pool: ConnectionPool) -> None:
        """The is_deleted guard in the UPDATE lets only one restore through."""
        repository = PostgresAccountRepository(pool)
        account = new_account()
        repository.add(account)
        repository.update(account.id, {"is_deleted": True, "deleted_by": "Admin"})

        results = run_concurrently(lambda: repository.restore(account.id))

        assert sum(1 for r in results if r is not None) == 1
        assert repository.get(account.id).is_deleted is False
