from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime

from visitation.models import Appointment
from visitation.models.status import AppointmentStatus


class AppointmentBase(BaseModel):
    """Base schema for Appointment with common fields"""
    custodied_person_id: int = Field(..., gt=0, description="ID of the custodied person receiving the visit")
    visitor_id: int = Field(..., gt=0, description="ID of the visitor")
    scheduled_at: datetime = Field(..., description="Date and time of the visit")
    notes: Optional[str] = Field(None, description="Free-text note, length limited by MAX_NOTES_LENGTH")


class AppointmentCreate(AppointmentBase):
    """Schema for scheduling a new appointment"""
    pass


class AppointmentUpdate(AppointmentBase):
    """Schema for replacing an appointment; status_id is optional"""
    status_id: Optional[int] = Field(None, gt=0, description="New status ID, if the status should change")


class AppointmentResponse(BaseModel):
    """Schema for appointment response, enriched with display fields"""
    id: int
    custodied_person_id: int
    custodied_person_name: Optional[str] = None
    custodied_person_record_number: Optional[str] = None
    visitor_id: int
    visitor_name: Optional[str] = None
    visitor_document_number: Optional[str] = None
    scheduled_at: datetime
    scheduled_at_display: str = Field(..., description="Scheduled time as dd/mm/YYYY HH:MM")
    status_id: int
    status: AppointmentStatus
    facility_id: Optional[int] = None
    facility_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentResponse":
        custodied_person = appointment.custodied_person
        visitor = appointment.visitor
        facility = custodied_person.facility if custodied_person else None
        return cls(
            id=appointment.id,
            custodied_person_id=appointment.custodied_person_id,
            custodied_person_name=custodied_person.name if custodied_person else None,
            custodied_person_record_number=custodied_person.record_number if custodied_person else None,
            visitor_id=appointment.visitor_id,
            visitor_name=visitor.visitor_name if visitor else None,
            visitor_document_number=visitor.document_number if visitor else None,
            scheduled_at=appointment.scheduled_at,
            scheduled_at_display=appointment.scheduled_at.strftime("%d/%m/%Y %H:%M"),
            status_id=appointment.status_id,
            status=appointment.status.value,
            facility_id=facility.id if facility else None,
            facility_name=facility.name if facility else None,
            notes=appointment.notes,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )


class AppointmentListResponse(BaseModel):
    """Schema for paginated appointment list"""
    total: int
    appointments: list[AppointmentResponse]
    page: int
    page_size: int


class StatusResponse(BaseModel):
    """Schema for status lookup rows"""
    id: int
    code: AppointmentStatus

    model_config = ConfigDict(from_attributes=True)
