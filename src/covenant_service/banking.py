"""
Ledger — in-memory счета self-banking дивизиона с журналом аудита.

Балансы хранятся в целых единицах валюты, чтобы переводы не копили
ошибку округления.
"""

from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock
from typing import Any, Iterable, Literal, Optional

from pydantic import BaseModel, Field

from .core.envelope import utc_now
from .core.errors import AlreadyExistsError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

RESERVE_ACCOUNT_ID = "reserve"

AccountStatus = Literal["open", "closed"]
LoanStatus = Literal["active", "repaid"]


class Account(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    balance: int = Field(default=0, ge=0)
    status: AccountStatus = "open"


class AuditEntry(BaseModel):
    type: str
    timestamp: datetime = Field(default_factory=utc_now)
    data: dict[str, Any] = Field(default_factory=dict)


class Loan(BaseModel):
    id: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0)
    status: LoanStatus = "active"


class LedgerSummary(BaseModel):
    total: int
    reserve: int
    accounts: list[Account]
    loans: list[Loan]


SAMPLE_ACCOUNTS: tuple[Account, ...] = (
    Account(id="main", name="Main Account", balance=1_200_000),
    Account(id=RESERVE_ACCOUNT_ID, name="Reserve Account", balance=200_000),
    Account(id="treasury", name="Treasury", balance=500_000),
)

SAMPLE_LOANS: tuple[Loan, ...] = (
    Loan(id="1001", amount=10_000),
    Loan(id="1002", amount=25_000, status="repaid"),
)


class Ledger:
    """
    Книга счетов.

    Все изменения (счета, переводы, займы) дописываются в журнал
    аудита; журнал только растёт.
    """

    def __init__(self, accounts: Iterable[Account] = (), loans: Iterable[Loan] = ()) -> None:
        self._accounts: dict[str, Account] = {}
        self._loans: dict[str, Loan] = {}
        self._audit: list[AuditEntry] = []
        self._lock = Lock()
        for account in accounts:
            self.create_account(account)
        for loan in loans:
            self.create_loan(loan)

    @classmethod
    def with_samples(cls) -> Ledger:
        return cls(SAMPLE_ACCOUNTS, SAMPLE_LOANS)

    def create_account(self, account: Account) -> Account:
        """
        Открыть счёт.

        Raises:
            AlreadyExistsError: Счёт с таким id уже существует.
        """
        with self._lock:
            if account.id in self._accounts:
                raise AlreadyExistsError(f"Account '{account.id}' already exists")
            self._accounts[account.id] = account.model_copy()
            self._record("account-create", id=account.id, balance=account.balance)
        logger.info("Account '%s' opened", account.id)
        return account.model_copy()

    def close_account(self, account_id: str) -> Account:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"Account '{account_id}' not found")
            account.status = "closed"
            self._record("account-close", id=account_id)
            return account.model_copy()

    def get_account(self, account_id: str) -> Account:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"Account '{account_id}' not found")
            return account.model_copy()

    def list_accounts(self) -> list[Account]:
        with self._lock:
            return [a.model_copy() for a in self._accounts.values()]

    def transfer(self, source: str, target: str, amount: int) -> tuple[Account, Account]:
        """
        Перевести сумму между открытыми счетами.

        Args:
            source: Счёт списания.
            target: Счёт зачисления.
            amount: Положительная сумма.

        Returns:
            Обновлённые счета (списания, зачисления).

        Raises:
            InvalidInputError: Неизвестный или закрытый счёт, неположительная
                сумма, перевод на тот же счёт или нехватка средств.
        """
        if amount <= 0:
            raise InvalidInputError("Transfer amount must be positive")
        if source == target:
            raise InvalidInputError("Cannot transfer to the same account")
        with self._lock:
            from_acc = self._accounts.get(source)
            to_acc = self._accounts.get(target)
            if from_acc is None or to_acc is None:
                raise InvalidInputError("Invalid account", details={"from": source, "to": target})
            if from_acc.status == "closed" or to_acc.status == "closed":
                raise InvalidInputError("Account is closed", details={"from": source, "to": target})
            if from_acc.balance < amount:
                raise InvalidInputError(
                    "Insufficient funds",
                    details={"available": from_acc.balance, "requested": amount},
                )
            from_acc.balance -= amount
            to_acc.balance += amount
            self._record("transfer", **{"from": source, "to": target, "amount": amount})
            logger.info("Transferred %d from '%s' to '%s'", amount, source, target)
            return from_acc.model_copy(), to_acc.model_copy()

    def create_loan(self, loan: Loan) -> Loan:
        """
        Выдать займ.

        Raises:
            AlreadyExistsError: Займ с таким id уже существует.
        """
        with self._lock:
            if loan.id in self._loans:
                raise AlreadyExistsError(f"Loan '{loan.id}' already exists")
            self._loans[loan.id] = loan.model_copy()
            self._record("loan-create", id=loan.id, amount=loan.amount)
        logger.info("Loan '%s' issued for %d", loan.id, loan.amount)
        return loan.model_copy()

    def list_loans(self) -> list[Loan]:
        with self._lock:
            return [loan.model_copy() for loan in self._loans.values()]

    def summary(self) -> LedgerSummary:
        """Суммарный баланс, остаток резервного счёта, счета и займы."""
        with self._lock:
            accounts = [a.model_copy() for a in self._accounts.values()]
            loans = [loan.model_copy() for loan in self._loans.values()]
        reserve: Optional[Account] = next((a for a in accounts if a.id == RESERVE_ACCOUNT_ID), None)
        return LedgerSummary(
            total=sum(a.balance for a in accounts),
            reserve=reserve.balance if reserve else 0,
            accounts=accounts,
            loans=loans,
        )

    @property
    def audit_log(self) -> list[AuditEntry]:
        with self._lock:
            return list(self._audit)

    def _record(self, entry_type: str, **data: Any) -> None:
        self._audit.append(AuditEntry(type=entry_type, data=data))
