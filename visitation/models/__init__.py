from visitation.models.facility import Facility
from visitation.models.custodied_person import CustodiedPerson
from visitation.models.visitor import Visitor
from visitation.models.status import Status, AppointmentStatus
from visitation.models.appointment import Appointment

__all__ = ["Facility", "CustodiedPerson", "Visitor", "Status", "AppointmentStatus", "Appointment"]
