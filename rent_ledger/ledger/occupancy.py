"""有効な契約から物件ごとの入居戸数・空室数を算出する。"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from .records import LeaseTerms


class HasCapacity(Protocol):
    id: object
    total_flats: int


def occupied_units(property_obj: HasCapacity, leases: Iterable[LeaseTerms], today: date) -> int:
    """有効契約の戸数合計。データ不整合で総戸数を超えてもそのまま返す。"""
    property_id = str(property_obj.id)
    return sum(
        lease.unit_count
        for lease in leases
        if lease.property_id == property_id and lease.is_effectively_active(today)
    )


def vacant_units(property_obj: HasCapacity, leases: Iterable[LeaseTerms], today: date) -> int:
    total = int(property_obj.total_flats or 0)
    return max(total - occupied_units(property_obj, leases, today), 0)


def available_units(
    property_obj: HasCapacity,
    leases: Iterable[LeaseTerms],
    today: date,
    editing_lease: Optional[LeaseTerms] = None,
) -> int:
    """新規・更新契約に割り当て可能な戸数。

    編集中の契約が既に押さえている戸数は足し戻し、自分自身で枠を塞がないようにする。
    """
    available = vacant_units(property_obj, leases, today)
    if editing_lease is not None and editing_lease.is_effectively_active(today):
        if editing_lease.property_id == str(property_obj.id):
            available += editing_lease.unit_count
    return available
