"""Enrollment roster package: plans, students and the operations over them."""

from . import data_loader
from .errors import CapacityExceededError, NotFoundError, RosterError, ValidationError, WorkflowStateError
from .models import NewStudentInput, Plan, Student, StudentPatch, StudentStatus
from .plans import PlanRegistry
from .query import RosterQuery, filter_students
from .roster import RosterStore
from .selection import SelectionTracker
from .session import RosterSession
from .workflow import EnrollmentWorkflow

__all__ = [
    "data_loader",
    "CapacityExceededError",
    "NotFoundError",
    "RosterError",
    "ValidationError",
    "WorkflowStateError",
    "NewStudentInput",
    "Plan",
    "Student",
    "StudentPatch",
    "StudentStatus",
    "PlanRegistry",
    "RosterQuery",
    "filter_students",
    "RosterStore",
    "SelectionTracker",
    "RosterSession",
    "EnrollmentWorkflow",
]
