"""
Report routes
"""
from typing import List
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from hms.dependencies import get_store
from hms.models.schemas import BookingDetail, RevenueReport, OutstandingReport, OccupancyReport
from hms.services.report_service import ReportService
from hms.services.store import HotelStore

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/arrivals", response_model=List[BookingDetail])
def get_arrivals(day: date, store: HotelStore = Depends(get_store)):
    return ReportService(store).get_arrivals_report(day)


@router.get("/departures", response_model=List[BookingDetail])
def get_departures(day: date, store: HotelStore = Depends(get_store)):
    return ReportService(store).get_departures_report(day)


@router.get("/revenue", response_model=RevenueReport)
def get_revenue(date_from: date, date_to: date, store: HotelStore = Depends(get_store)):
    """Payments received per method"""
    if date_to < date_from:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date_to must not be before date_from")
    return ReportService(store).get_revenue_report(date_from, date_to)


@router.get("/outstanding", response_model=OutstandingReport)
def get_outstanding(store: HotelStore = Depends(get_store)):
    """In-house guests with an unpaid balance"""
    return ReportService(store).get_outstanding_report()


@router.get("/occupancy", response_model=OccupancyReport)
def get_occupancy(store: HotelStore = Depends(get_store)):
    return ReportService(store).get_occupancy_report()
