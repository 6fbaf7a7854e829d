# Re-export Beanie documents
from .appointment import Appointment
from .gdpr import User, AuditLog
