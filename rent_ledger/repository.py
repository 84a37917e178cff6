"""台帳エンジンと保存先をつなぐリポジトリ。

エンジンは常に「全件読み込み → 計算 → 全件書き戻し」で動くため、
ここでは契約の読み出しと台帳全体の読み書きだけを提供する。
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Iterable, Optional

from .extensions import db
from .ledger.records import LeaseTerms, LedgerEntry
from .models import Lease, RentPayment

logger = logging.getLogger(__name__)


class LedgerRepository(ABC):
    @abstractmethod
    def load_leases(self) -> list[LeaseTerms]:
        ...

    @abstractmethod
    def load_ledger(self) -> list[LedgerEntry]:
        ...

    @abstractmethod
    def save_ledger(self, entries: Iterable[LedgerEntry]) -> None:
        """渡された台帳で保存内容を丸ごと置き換える。"""

    @abstractmethod
    def set_lease_status(self, lease_id: str, status: str) -> None:
        ...

    def find_lease(self, lease_id: str) -> Optional[LeaseTerms]:
        for lease in self.load_leases():
            if lease.id == lease_id:
                return lease
        return None


class InMemoryLedgerRepository(LedgerRepository):
    def __init__(
        self,
        leases: Optional[Iterable[LeaseTerms]] = None,
        entries: Optional[Iterable[LedgerEntry]] = None,
    ) -> None:
        self.leases = list(leases or [])
        self.entries = list(entries or [])
        self.save_count = 0

    def load_leases(self) -> list[LeaseTerms]:
        return list(self.leases)

    def load_ledger(self) -> list[LedgerEntry]:
        return list(self.entries)

    def save_ledger(self, entries: Iterable[LedgerEntry]) -> None:
        self.entries = list(entries)
        self.save_count += 1

    def set_lease_status(self, lease_id: str, status: str) -> None:
        self.leases = [
            replace(lease, status=status) if lease.id == lease_id else lease for lease in self.leases
        ]


class SqlAlchemyLedgerRepository(LedgerRepository):
    def __init__(self, session=None) -> None:
        self.session = session or db.session

    def load_leases(self) -> list[LeaseTerms]:
        return [lease.to_terms() for lease in self.session.query(Lease).order_by(Lease.id).all()]

    def load_ledger(self) -> list[LedgerEntry]:
        rows = self.session.query(RentPayment).order_by(RentPayment.year, RentPayment.id).all()
        return [row.to_entry() for row in rows]

    def save_ledger(self, entries: Iterable[LedgerEntry]) -> None:
        # id 単位で upsert し、渡されなかった行は削除する（1 トランザクション）。
        rows = {row.id: row for row in self.session.query(RentPayment).all()}
        seen: set[str] = set()
        created = 0
        for entry in entries:
            seen.add(entry.id)
            row = rows.get(entry.id)
            if row is None:
                row = RentPayment(id=entry.id)
                self.session.add(row)
                created += 1
            row.apply_entry(entry)
        removed = 0
        for row_id, row in rows.items():
            if row_id not in seen:
                self.session.delete(row)
                removed += 1
        self.session.commit()
        logger.debug("Saved ledger: %d rows (%d new, %d removed)", len(seen), created, removed)

    def set_lease_status(self, lease_id: str, status: str) -> None:
        lease = self.session.get(Lease, int(lease_id))
        if lease is None:
            return
        lease.status = status
        self.session.commit()
