"""
Appointment Router
Handles visit scheduling endpoints
"""
from datetime import date
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from visitation.core.config import settings
from visitation.core.database import get_db
from visitation.repositories import AppointmentCriteria
from visitation.schemas.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentResponse,
    AppointmentListResponse,
)
from visitation.services.appointment_scheduler import AppointmentScheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_scheduler(db: Session = Depends(get_db)) -> AppointmentScheduler:
    """Dependency providing a scheduler configured from settings."""
    return AppointmentScheduler.from_settings(db)


def _responses(appointments) -> List[AppointmentResponse]:
    return [AppointmentResponse.from_appointment(a) for a in appointments]


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    appointment_data: AppointmentCreate,
    scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    """
    Schedule a new visit.

    Args:
        appointment_data: Custodied person, visitor, date/time and note
        scheduler: Appointment scheduler

    Returns:
        Created appointment with status SCHEDULED
    """
    logger.info(
        f"[Appointment] Scheduling visit for custodied person {appointment_data.custodied_person_id} "
        f"with visitor {appointment_data.visitor_id}"
    )
    appointment = scheduler.create(
        custodied_person_id=appointment_data.custodied_person_id,
        visitor_id=appointment_data.visitor_id,
        scheduled_at=appointment_data.scheduled_at,
        notes=appointment_data.notes,
    )
    return AppointmentResponse.from_appointment(appointment)


@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    custodied_person_id: Optional[int] = Query(None, gt=0),
    visitor_id: Optional[int] = Query(None, gt=0),
    start_date: Optional[date] = Query(None, description="First day included (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Last day included (YYYY-MM-DD)"),
    status_id: Optional[int] = Query(None, gt=0),
    scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    """
    List appointments matching the given filters.
    Filters left out impose no constraint. With a date range the result is
    ordered oldest first, otherwise newest first.
    """
    criteria = AppointmentCriteria.for_dates(
        start_date,
        end_date,
        custodied_person_id=custodied_person_id,
        visitor_id=visitor_id,
        status_id=status_id,
    )
    return _responses(scheduler.list(criteria))


@router.get("/paged", response_model=AppointmentListResponse)
def list_appointments_paged(
    custodied_person_id: Optional[int] = Query(None, gt=0),
    visitor_id: Optional[int] = Query(None, gt=0),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    status_id: Optional[int] = Query(None, gt=0),
    page: int = Query(0, ge=0, description="Zero-based page number"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    """
    Paginated, filtered listing, newest first.
    """
    criteria = AppointmentCriteria.for_dates(
        start_date,
        end_date,
        custodied_person_id=custodied_person_id,
        visitor_id=visitor_id,
        status_id=status_id,
    )
    total, appointments = scheduler.list_page(criteria, page=page, page_size=page_size)
    return AppointmentListResponse(
        total=total,
        appointments=_responses(appointments),
        page=page,
        page_size=page_size,
    )


@router.get("/custodied/{custodied_person_id}", response_model=List[AppointmentResponse])
def list_by_custodied_person(custodied_person_id: int, scheduler: AppointmentScheduler = Depends(get_scheduler)):
    """All appointments of one custodied person, newest first."""
    return _responses(scheduler.list_for_custodied_person(custodied_person_id))


@router.get("/visitor/{visitor_id}", response_model=List[AppointmentResponse])
def list_by_visitor(visitor_id: int, scheduler: AppointmentScheduler = Depends(get_scheduler)):
    """All appointments of one visitor, newest first."""
    return _responses(scheduler.list_for_visitor(visitor_id))


@router.get("/date/{day}", response_model=List[AppointmentResponse])
def list_by_date(day: date, scheduler: AppointmentScheduler = Depends(get_scheduler)):
    """Appointments on one calendar day, oldest first."""
    return _responses(scheduler.list_for_date(day))


@router.get("/status/{status_id}", response_model=List[AppointmentResponse])
def list_by_status(status_id: int, scheduler: AppointmentScheduler = Depends(get_scheduler)):
    """Appointments currently in one status, newest first."""
    return _responses(scheduler.list_for_status(status_id))


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(appointment_id: int, scheduler: AppointmentScheduler = Depends(get_scheduler)):
    """Get a single appointment by ID."""
    return AppointmentResponse.from_appointment(scheduler.get(appointment_id))


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    appointment_data: AppointmentUpdate,
    scheduler: AppointmentScheduler = Depends(get_scheduler)
):
    """
    Replace an appointment's parties, time and note, optionally moving its status.

    Args:
        appointment_id: Appointment to change
        appointment_data: New values; status_id may be omitted
        scheduler: Appointment scheduler

    Returns:
        Updated appointment
    """
    logger.info(f"[Appointment] Updating appointment {appointment_id}")
    appointment = scheduler.update(
        appointment_id,
        custodied_person_id=appointment_data.custodied_person_id,
        visitor_id=appointment_data.visitor_id,
        scheduled_at=appointment_data.scheduled_at,
        notes=appointment_data.notes,
        status_id=appointment_data.status_id,
    )
    return AppointmentResponse.from_appointment(appointment)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_appointment(appointment_id: int, scheduler: AppointmentScheduler = Depends(get_scheduler)):
    """
    Cancel an appointment. The record is kept with status CANCELED.
    """
    logger.info(f"[Appointment] Canceling appointment {appointment_id}")
    scheduler.cancel(appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
