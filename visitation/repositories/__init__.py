from visitation.repositories.appointment_repository import AppointmentCriteria, AppointmentRepository
from visitation.repositories.reference_repository import ReferenceRepository

__all__ = ["AppointmentCriteria", "AppointmentRepository", "ReferenceRepository"]
