"""Database models."""

from fieldsmart.models.tenant import Tenant, User
from fieldsmart.models.customer import Address, Customer
from fieldsmart.models.appointment import Appointment
from fieldsmart.models.job import Job, JobStatusHistory
from fieldsmart.models.invoice import Invoice, InvoiceLineItem, Payment
from fieldsmart.models.estimate import Estimate, EstimateLineItem
from fieldsmart.models.service_request import ServiceRequest
from fieldsmart.models.sequence import SequenceCounter

__all__ = [
    "Tenant",
    "User",
    "Customer",
    "Address",
    "Appointment",
    "Job",
    "JobStatusHistory",
    "Invoice",
    "InvoiceLineItem",
    "Payment",
    "Estimate",
    "EstimateLineItem",
    "ServiceRequest",
    "SequenceCounter",
]
