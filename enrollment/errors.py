"""Typed failures raised by roster operations.

None of these are fatal: the operation that raised leaves the roster,
the selection and the filters exactly as they were.
"""

from __future__ import annotations


class RosterError(Exception):
    """Base class for every recoverable roster failure."""


class ValidationError(RosterError):
    """Raised when submitted data is incomplete or references nothing."""


class CapacityExceededError(RosterError):
    def __init__(self, plan_id: str, capacity: int):
        super().__init__(f"Plan '{plan_id}' has reached its capacity limit ({capacity}).")
        self.plan_id = plan_id
        self.capacity = capacity


class NotFoundError(RosterError):
    def __init__(self, student_id: str):
        super().__init__(f"No student found with id '{student_id}'.")
        self.student_id = student_id


class WorkflowStateError(RosterError):
    """Raised when a form action does not fit the current workflow state."""
