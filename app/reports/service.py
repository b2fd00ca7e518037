"""Relatorios gerenciais derivados dos eventos de um periodo.

Todas as visoes partem da mesma consulta (periodo + artista opcional) e fazem
uma unica passada de agrupamento. Valores monetarios malformados contam como
zero; a quantidade deles volta em ``ReportResult.malformed``.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.db.models import Event
from app.db.store import DocumentStore
from app.reports.money import MoneyTally, Number
from app.repositories.contractors import ContractorRepository
from app.repositories.events import EventRepository
from app.repositories.local_partners import LocalPartnerRepository

logger = logging.getLogger("agenda.reports")

NO_CONTRACTOR_LABEL = "(Sem contratante)"
NO_LOCAL_PARTNER_LABEL = "(Sem parceiro local)"
NO_STATE_LABEL = "--"


class ReportRow(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PerformanceRow(ReportRow):
    status: str
    count: int
    total: Number


class StateRow(ReportRow):
    state: str
    count: int


class ContractorRow(ReportRow):
    contractor_id: Optional[int]
    name: str
    count: int
    total: Number


class LocalPartnerRow(ReportRow):
    local_partner_id: Optional[int]
    name: str
    count: int
    total: Number


class ReceivableRow(ReportRow):
    id: int
    title: Optional[str]
    event_date: Optional[datetime]
    payment_due_date: Optional[datetime]
    is_paid: bool
    cache: Number
    artist_id: Optional[int]


@dataclass
class ReportFilters:
    start_date: datetime
    end_date: datetime
    artist_id: Optional[int] = None


@dataclass
class ReportResult:
    rows: list = field(default_factory=list)
    malformed: int = 0


def _due_date_key(row: ReceivableRow) -> float:
    # sem vencimento equivale a epoch: vem primeiro
    return row.payment_due_date.timestamp() if row.payment_due_date else 0


class ReportService:
    def __init__(self, store: DocumentStore) -> None:
        self.events = EventRepository(store)
        self.contractors = ContractorRepository(store)
        self.local_partners = LocalPartnerRepository(store)

    def _events_in_range(self, filters: ReportFilters) -> list[Event]:
        return self.events.list(
            artist_id=filters.artist_id,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )

    def _finish(self, name: str, rows: list, money: Optional[MoneyTally] = None) -> ReportResult:
        malformed = money.malformed if money else 0
        if malformed:
            logger.warning("report=%s malformed_money_values=%s", name, malformed)
        return ReportResult(rows=rows, malformed=malformed)

    def performance(self, filters: ReportFilters) -> ReportResult:
        money = MoneyTally()
        groups: dict[str, PerformanceRow] = {}
        for event in self._events_in_range(filters):
            key = event.status or "reservado"
            row = groups.setdefault(key, PerformanceRow(status=key, count=0, total=0))
            row.count += 1
            row.total += money(event.cache)
        rows = sorted(groups.values(), key=lambda row: row.total, reverse=True)
        return self._finish("performance", rows, money)

    def events_by_state(self, filters: ReportFilters) -> ReportResult:
        groups: dict[str, StateRow] = {}
        for event in self._events_in_range(filters):
            key = (event.state or NO_STATE_LABEL).upper()
            row = groups.setdefault(key, StateRow(state=key, count=0))
            row.count += 1
        rows = sorted(groups.values(), key=lambda row: row.count, reverse=True)
        return self._finish("eventsByState", rows)

    def _by_party(
        self,
        name: str,
        filters: ReportFilters,
        party_id: Callable[[Event], Optional[int]],
        names: dict[int, Optional[str]],
        empty_label: str,
        row_factory: Callable[[Optional[int], str], BaseModel],
    ) -> ReportResult:
        money = MoneyTally()
        groups: dict[str, BaseModel] = {}
        for event in self._events_in_range(filters):
            record_id = party_id(event)
            if record_id:
                label = names.get(record_id) or f"#{record_id}"
            else:
                label = empty_label
            row = groups.get(str(record_id or 0))
            if row is None:
                row = groups[str(record_id or 0)] = row_factory(record_id, label)
            row.count += 1
            row.total += money(event.cache)
        rows = sorted(groups.values(), key=lambda row: row.total, reverse=True)
        return self._finish(name, rows, money)

    def contractors_report(self, filters: ReportFilters) -> ReportResult:
        names = {item.id: item.name for item in self.contractors.list(include_inactive=True)}
        return self._by_party(
            "contractors",
            filters,
            lambda event: event.contractor_id,
            names,
            NO_CONTRACTOR_LABEL,
            lambda record_id, label: ContractorRow(contractor_id=record_id, name=label, count=0, total=0),
        )

    def local_partners_report(self, filters: ReportFilters) -> ReportResult:
        names = {item.id: item.name for item in self.local_partners.list(include_inactive=True)}
        return self._by_party(
            "localPartners",
            filters,
            lambda event: event.local_partner_id,
            names,
            NO_LOCAL_PARTNER_LABEL,
            lambda record_id, label: LocalPartnerRow(local_partner_id=record_id, name=label, count=0, total=0),
        )

    def receivables(self, filters: ReportFilters) -> ReportResult:
        money = MoneyTally()
        rows = [
            ReceivableRow(
                id=event.id,
                title=event.title,
                event_date=event.event_date,
                payment_due_date=event.payment_due_date,
                is_paid=bool(event.is_paid),
                cache=money(event.cache),
                artist_id=event.artist_id,
            )
            for event in self._events_in_range(filters)
        ]
        rows.sort(key=_due_date_key)
        return self._finish("receivables", rows, money)

    def build(self, report: str, filters: ReportFilters) -> ReportResult:
        builders = {
            "performance": self.performance,
            "eventsByState": self.events_by_state,
            "contractors": self.contractors_report,
            "receivables": self.receivables,
            "localPartners": self.local_partners_report,
        }
        return builders[report](filters)
