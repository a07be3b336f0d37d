"""
Front desk routes
"""
from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, status
from hms.dependencies import get_store, get_operator, http_error
from hms.exceptions import HMSError
from hms.models.ontology import Booking
from hms.models.schemas import CreateStayRequest, DashboardStats
from hms.services.booking_service import BookingService
from hms.services.report_service import ReportService
from hms.services.store import HotelStore

router = APIRouter(prefix="/front-desk", tags=["Front desk"])


@router.post("/stays", response_model=Booking, status_code=status.HTTP_201_CREATED)
def create_stay(
    data: CreateStayRequest,
    store: HotelStore = Depends(get_store),
    operator: str = Depends(get_operator)
):
    """Walk-in or reservation taken at the desk"""
    try:
        return BookingService(store).create_stay(data, operator)
    except HMSError as e:
        raise http_error(e)


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(today: Optional[date] = None, store: HotelStore = Depends(get_store)):
    return ReportService(store).get_dashboard_stats(today)
