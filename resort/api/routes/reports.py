from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from resort.api.deps import viewer_or_above
from resort.core import messages, responses
from resort.db.session import get_db
from resort.models.admin_user import AdminUser
from resort.models.enums import BookingStatus, VisitType
from resort.services import report_service
from resort.utils.dates import format_date

router = APIRouter(prefix="/admin/reports", tags=["reports"])


def _csv_response(body: str, name: str, start, end) -> Response:
    filename = f"{name}-{format_date(start)}-{format_date(end)}.csv"
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/bookings")
def bookings_report(startDate: str | None = None, endDate: str | None = None,
                    visitType: VisitType | None = None, status: BookingStatus | None = None,
                    db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    start, end = report_service.resolve_range(startDate, endDate)
    data = report_service.bookings_report(db, start, end, visitType, status)
    return responses.success(messages.BOOKINGS_REPORT_FETCHED, data)


@router.get("/revenue")
def revenue_report(startDate: str | None = None, endDate: str | None = None,
                   db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    start, end = report_service.resolve_range(startDate, endDate)
    return responses.success(messages.REVENUE_REPORT_FETCHED, report_service.revenue_report(db, start, end))


@router.get("/occupancy")
def occupancy_report(startDate: str | None = None, endDate: str | None = None,
                     db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    start, end = report_service.resolve_range(startDate, endDate)
    return responses.success(messages.OCCUPANCY_REPORT_FETCHED, report_service.occupancy_report(db, start, end))


@router.get("/customers")
def customers_report(startDate: str | None = None, endDate: str | None = None,
                     db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    start, end = report_service.resolve_range(startDate, endDate)
    return responses.success(messages.CUSTOMERS_REPORT_FETCHED, report_service.customers_report(db, start, end))


@router.get("/export/bookings")
def export_bookings(startDate: str | None = None, endDate: str | None = None,
                    db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    start, end = report_service.resolve_range(startDate, endDate)
    return _csv_response(report_service.bookings_csv(db, start, end), "bookings", start, end)


@router.get("/export/revenue")
def export_revenue(startDate: str | None = None, endDate: str | None = None,
                   db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    start, end = report_service.resolve_range(startDate, endDate)
    return _csv_response(report_service.revenue_csv(db, start, end), "revenue", start, end)
