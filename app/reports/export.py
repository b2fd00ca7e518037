from datetime import datetime, timezone
from io import BytesIO
from typing import Tuple

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from app.reports.service import ReportFilters, ReportResult

REPORT_COLUMNS = {
    "performance": [("Status", "status"), ("Eventos", "count"), ("Total cache", "total")],
    "eventsByState": [("UF", "state"), ("Eventos", "count")],
    "contractors": [("Contratante", "name"), ("ID", "contractor_id"), ("Eventos", "count"), ("Total cache", "total")],
    "receivables": [
        ("ID", "id"),
        ("Evento", "title"),
        ("Data", "event_date"),
        ("Vencimento", "payment_due_date"),
        ("Pago", "is_paid"),
        ("Cache", "cache"),
        ("Artista", "artist_id"),
    ],
    "localPartners": [
        ("Parceiro local", "name"),
        ("ID", "local_partner_id"),
        ("Eventos", "count"),
        ("Total cache", "total"),
    ],
}


def _cell(value):
    if isinstance(value, datetime):
        # openpyxl nao grava datetime com timezone
        return value.replace(tzinfo=None)
    if isinstance(value, bool):
        return "Sim" if value else "Nao"
    return value


def build_report_workbook(report: str, filters: ReportFilters, result: ReportResult) -> Tuple[bytes, str]:
    columns = REPORT_COLUMNS[report]
    wb = Workbook()
    ws = wb.active
    ws.title = "RELATORIO"
    ws.append([label for label, _ in columns])
    for row in result.rows:
        ws.append([_cell(getattr(row, key)) for _, key in columns])

    ws.freeze_panes = "A2"
    for idx, _ in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = 22

    info = wb.create_sheet("INFO")
    info["A1"] = "Relatorio"
    info["B1"] = report
    info["A2"] = "Inicio"
    info["B2"] = _cell(filters.start_date)
    info["A3"] = "Fim"
    info["B3"] = _cell(filters.end_date)
    info["A4"] = "Artista"
    info["B4"] = filters.artist_id
    info["A5"] = "Valores invalidos"
    info["B5"] = result.malformed
    info["A6"] = "Gerado em"
    info["B6"] = datetime.now(timezone.utc).isoformat()

    out = BytesIO()
    wb.save(out)
    filename = f"relatorio_{report}_{filters.start_date:%Y%m%d}_{filters.end_date:%Y%m%d}.xlsx"
    return out.getvalue(), filename
