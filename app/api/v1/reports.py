from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response

from app.core.security import get_current_user
from app.db.models import User
from app.db.session import get_store
from app.db.store import DocumentStore
from app.reports.export import build_report_workbook
from app.reports.service import ReportFilters, ReportResult, ReportService

router = APIRouter(prefix="/trpc", tags=["Relatorios"])

MALFORMED_HEADER = "X-Report-Malformed-Values"

ReportName = Literal["performance", "eventsByState", "contractors", "receivables", "localPartners"]


def report_filters(
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    artist_id: Optional[int] = Query(None, alias="artistId"),
) -> ReportFilters:
    return ReportFilters(start_date=start_date, end_date=end_date, artist_id=artist_id)


def _respond(response: Response, result: ReportResult) -> list:
    response.headers[MALFORMED_HEADER] = str(result.malformed)
    return result.rows


@router.get("/reports.performance")
def performance_report(
    response: Response,
    filters: ReportFilters = Depends(report_filters),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _respond(response, ReportService(store).performance(filters))


@router.get("/reports.eventsByState")
def events_by_state_report(
    response: Response,
    filters: ReportFilters = Depends(report_filters),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _respond(response, ReportService(store).events_by_state(filters))


@router.get("/reports.contractors")
def contractors_report(
    response: Response,
    filters: ReportFilters = Depends(report_filters),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _respond(response, ReportService(store).contractors_report(filters))


@router.get("/reports.receivables")
def receivables_report(
    response: Response,
    filters: ReportFilters = Depends(report_filters),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _respond(response, ReportService(store).receivables(filters))


@router.get("/reports.localPartners")
def local_partners_report(
    response: Response,
    filters: ReportFilters = Depends(report_filters),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return _respond(response, ReportService(store).local_partners_report(filters))


@router.get("/reports.export")
def export_report(
    report: ReportName = Query(...),
    filters: ReportFilters = Depends(report_filters),
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    result = ReportService(store).build(report, filters)
    content, filename = build_report_workbook(report, filters, result)
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            MALFORMED_HEADER: str(result.malformed),
        },
    )
