import unittest
from datetime import datetime, timezone
from io import BytesIO

from openpyxl import load_workbook

from app.db.store import MemoryStore
from app.reports.export import build_report_workbook
from app.reports.money import parse_money, to_money
from app.reports.service import (
    NO_CONTRACTOR_LABEL,
    NO_LOCAL_PARTNER_LABEL,
    ReportFilters,
    ReportService,
)
from app.repositories.contractors import ContractorRepository
from app.repositories.events import EventRepository
from app.repositories.local_partners import LocalPartnerRepository


def _when(day):
    return datetime(2025, 3, day, 21, 0, tzinfo=timezone.utc)


class MoneyTests(unittest.TestCase):
    def test_brazilian_format(self):
        self.assertEqual(to_money("1.234,56"), 1234.56)
        self.assertEqual(to_money(" 2.500,00 "), 2500)
        self.assertEqual(to_money("300"), 300)

    def test_numbers_pass_through(self):
        self.assertEqual(to_money(500), 500)
        self.assertEqual(to_money(12.5), 12.5)

    def test_empty_is_zero_and_garbage_is_flagged(self):
        self.assertEqual(to_money(None), 0)
        self.assertEqual(to_money(""), 0)
        self.assertEqual(to_money("abc"), 0)
        self.assertIsNone(parse_money("abc"))
        self.assertIsNone(parse_money("1_000"))
        self.assertIsNone(parse_money("inf"))
        self.assertIsNone(parse_money(True))


class ReportServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = MemoryStore()
        self.events = EventRepository(self.store)
        self.contractors = ContractorRepository(self.store)
        self.partners = LocalPartnerRepository(self.store)
        self.service = ReportService(self.store)
        self.filters = ReportFilters(start_date=_when(1), end_date=_when(31))

    def _event(self, **data):
        values = {"artist_id": 1, "title": "Show", "event_date": _when(10)}
        values.update(data)
        return self.events.create(values)

    def test_performance_groups_by_status(self):
        self._event(status="confirmado", cache="1.500,00")
        self._event(status="confirmado", cache="2.500,00")
        self._event(cache="800")
        self._event(status="cancelado", cache="9.000,00", event_date=datetime(2025, 4, 2, tzinfo=timezone.utc))

        result = self.service.performance(self.filters)
        rows = [row.model_dump(by_alias=True) for row in result.rows]
        self.assertEqual(
            rows,
            [
                {"status": "confirmado", "count": 2, "total": 4000},
                {"status": "reservado", "count": 1, "total": 800},
            ],
        )
        self.assertEqual(result.malformed, 0)

    def test_artist_filter(self):
        self._event(cache="100")
        self._event(artist_id=2, cache="200")
        filters = ReportFilters(start_date=_when(1), end_date=_when(31), artist_id=2)
        rows = self.service.performance(filters).rows
        self.assertEqual([(row.count, row.total) for row in rows], [(1, 200)])

    def test_malformed_values_are_counted(self):
        self._event(cache="abc")
        self._event(cache="1.000,00")
        result = self.service.performance(self.filters)
        self.assertEqual(result.rows[0].total, 1000)
        self.assertEqual(result.malformed, 1)

    def test_events_by_state(self):
        self._event(state="pe")
        self._event(state="PE")
        self._event(state="SP")
        self._event()
        rows = self.service.events_by_state(self.filters).rows
        self.assertEqual([(row.state, row.count) for row in rows[:1]], [("PE", 2)])
        self.assertEqual({row.state: row.count for row in rows}, {"PE": 2, "SP": 1, "--": 1})

    def test_contractors_report(self):
        prefeitura = self.contractors.create({"name": "Prefeitura"})
        self.contractors.delete(prefeitura)
        self._event(contractor_id=prefeitura, cache="5.000,00")
        self._event(contractor_id=prefeitura, cache="1.000,00")
        self._event(contractor_id=42, cache="3.000,00")
        self._event(cache="10")

        rows = self.service.contractors_report(self.filters).rows
        self.assertEqual(
            [(row.contractor_id, row.name, row.count, row.total) for row in rows],
            [
                (prefeitura, "Prefeitura", 2, 6000),
                (42, "#42", 1, 3000),
                (None, NO_CONTRACTOR_LABEL, 1, 10),
            ],
        )

    def test_local_partners_report(self):
        partner = self.partners.create({"name": "Joao"})
        self._event(local_partner_id=partner, cache="700")
        self._event(cache="900")
        rows = self.service.local_partners_report(self.filters).rows
        self.assertEqual(
            [(row.local_partner_id, row.name, row.total) for row in rows],
            [(None, NO_LOCAL_PARTNER_LABEL, 900), (partner, "Joao", 700)],
        )

    def test_receivables_sorted_by_due_date(self):
        later = self._event(title="B", cache="2.000,00", payment_due_date=_when(25))
        sooner = self._event(title="A", cache="1.000,00", payment_due_date=_when(12))
        no_due = self._event(title="C")
        rows = self.service.receivables(self.filters).rows
        self.assertEqual([row.id for row in rows], [no_due, sooner, later])
        self.assertEqual(rows[1].cache, 1000)
        self.assertFalse(rows[1].is_paid)

    def test_export_workbook(self):
        self._event(status="confirmado", cache="1.500,00")
        result = self.service.build("performance", self.filters)
        content, filename = build_report_workbook("performance", self.filters, result)

        self.assertTrue(filename.endswith(".xlsx"))
        wb = load_workbook(BytesIO(content))
        self.assertEqual(wb.sheetnames, ["RELATORIO", "INFO"])
        ws = wb["RELATORIO"]
        self.assertEqual([cell.value for cell in ws[1]], ["Status", "Eventos", "Total cache"])
        self.assertEqual([cell.value for cell in ws[2]], ["confirmado", 1, 1500])
