"""Token ledger: per-agent accounts and per-tribe treasuries."""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass, field

SYSTEM_ACCOUNT = "SYSTEM"
HISTORY_LIMIT = 50  # transactions kept per account


@dataclass
class Transaction:
    """A single ledger movement."""

    id: str
    sender: str
    recipient: str
    amount: float
    reason: str


@dataclass
class TokenAccount:
    """An agent's wallet."""

    agent_id: str
    tribe: str
    balance: float = 0.0
    total_earned: float = 0.0
    total_spent: float = 0.0
    transactions: deque[Transaction] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))


class TokenLedger:
    """Mints, burns and moves tokens between agent accounts.

    Accounts are keyed by agent id. Every tribe treasury starts funded and
    counts toward the total supply.
    """

    STARTING_BALANCE = 100.0
    TREASURY_START = 10000.0

    def __init__(self, tribes: list[str] | None = None):
        self._tribes = list(tribes or ["Alpha", "Beta", "Gamma"])
        self._accounts: dict[str, TokenAccount] = {}
        self._treasuries: dict[str, float] = {}
        self._total_supply = 0.0
        self._tx_ids = itertools.count(1)
        self._init_treasuries()

    def _init_treasuries(self) -> None:
        for tribe in self._tribes:
            self._treasuries[tribe] = self.TREASURY_START
            self._total_supply += self.TREASURY_START

    def create_account(self, agent_id: str, tribe: str) -> bool:
        """Open an account with the starting grant. False if it exists."""
        if agent_id in self._accounts:
            return False
        self._accounts[agent_id] = TokenAccount(agent_id=agent_id, tribe=tribe)
        self.mint(agent_id, self.STARTING_BALANCE, "initial_grant")
        return True

    def mint(self, agent_id: str, amount: float, reason: str) -> bool:
        account = self._accounts.get(agent_id)
        if account is None or amount <= 0:
            return False
        account.balance += amount
        account.total_earned += amount
        self._total_supply += amount
        self._record(account, SYSTEM_ACCOUNT, agent_id, amount, reason)
        return True

    def burn(self, agent_id: str, amount: float, reason: str) -> bool:
        account = self._accounts.get(agent_id)
        if account is None or amount <= 0 or account.balance < amount:
            return False
        account.balance -= amount
        account.total_spent += amount
        self._total_supply -= amount
        self._record(account, agent_id, SYSTEM_ACCOUNT, amount, reason)
        return True

    def earn_tokens(self, agent_id: str, amount: float, reason: str) -> bool:
        """Reward an agent. Unknown accounts and non-positive amounts are no-ops."""
        return self.mint(agent_id, amount, reason)

    def spend_tokens(self, agent_id: str, amount: float, purchase: str) -> bool:
        return self.burn(agent_id, amount, f"purchase:{purchase}")

    def transfer(self, sender: str, recipient: str, amount: float, reason: str = "transfer") -> bool:
        """Move tokens between two accounts. False on unknown account or low balance."""
        src = self._accounts.get(sender)
        dst = self._accounts.get(recipient)
        if src is None or dst is None or amount <= 0 or src.balance < amount:
            return False
        src.balance -= amount
        src.total_spent += amount
        dst.balance += amount
        dst.total_earned += amount
        self._record(src, sender, recipient, amount, reason)
        self._record(dst, sender, recipient, amount, reason)
        return True

    def _record(
        self, account: TokenAccount, sender: str, recipient: str, amount: float, reason: str
    ) -> None:
        account.transactions.append(
            Transaction(
                id=f"tx-{next(self._tx_ids)}",
                sender=sender,
                recipient=recipient,
                amount=amount,
                reason=reason,
            )
        )

    def balance(self, agent_id: str) -> float:
        account = self._accounts.get(agent_id)
        return account.balance if account else 0.0

    def account(self, agent_id: str) -> TokenAccount | None:
        return self._accounts.get(agent_id)

    def treasury_balance(self, tribe: str) -> float:
        return self._treasuries.get(tribe, 0.0)

    @property
    def total_supply(self) -> float:
        return self._total_supply

    def richest(self, limit: int = 5) -> list[TokenAccount]:
        """Accounts with the highest balances, richest first."""
        return sorted(self._accounts.values(), key=lambda a: a.balance, reverse=True)[:limit]

    def market_stats(self) -> dict:
        return {
            "total_supply": self._total_supply,
            "total_accounts": len(self._accounts),
            "total_transactions": sum(len(a.transactions) for a in self._accounts.values()),
            "treasuries": dict(self._treasuries),
        }

    def serialize(self) -> dict:
        return {
            "version": 1,
            "total_supply": self._total_supply,
            "treasuries": dict(self._treasuries),
            "accounts": [
                {
                    "agent_id": a.agent_id,
                    "tribe": a.tribe,
                    "balance": a.balance,
                    "total_earned": a.total_earned,
                    "total_spent": a.total_spent,
                    "transactions": [
                        [t.id, t.sender, t.recipient, t.amount, t.reason] for t in a.transactions
                    ],
                }
                for a in self._accounts.values()
            ],
        }

    def deserialize(self, data: dict) -> None:
        self._accounts = {}
        self._treasuries = {}
        self._total_supply = 0.0
        self._tx_ids = itertools.count(1)
        if not data:
            self._init_treasuries()
            return

        self._treasuries = {k: float(v) for k, v in data.get("treasuries", {}).items()}
        tx_count = 0
        for raw in data.get("accounts", []):
            account = TokenAccount(
                agent_id=raw["agent_id"],
                tribe=raw.get("tribe", ""),
                balance=float(raw.get("balance", 0.0)),
                total_earned=float(raw.get("total_earned", 0.0)),
                total_spent=float(raw.get("total_spent", 0.0)),
            )
            for tx_id, sender, recipient, amount, reason in raw.get("transactions", []):
                account.transactions.append(Transaction(tx_id, sender, recipient, amount, reason))
                tx_count += 1
            self._accounts[account.agent_id] = account
        self._total_supply = float(data.get("total_supply", 0.0))
        self._tx_ids = itertools.count(tx_count + 1)
