"""Static catalog of enrollment plans."""

from __future__ import annotations

from typing import Dict, Iterable

from .errors import ValidationError
from .models import Plan


class PlanRegistry:
    """Read-only, ordered catalog loaded once at start-up."""

    def __init__(self, plans: Iterable[Plan]):
        self._plans: tuple[Plan, ...] = tuple(plans)
        self._plans_by_id: Dict[str, Plan] = {}
        for plan in self._plans:
            if plan.identifier in self._plans_by_id:
                raise ValueError(f"Duplicate plan id '{plan.identifier}'.")
            if plan.capacity <= 0:
                raise ValueError(f"Plan '{plan.identifier}' must have a positive capacity.")
            self._plans_by_id[plan.identifier] = plan

    def list_plans(self) -> tuple[Plan, ...]:
        return self._plans

    def find_plan(self, plan_id: str) -> Plan | None:
        return self._plans_by_id.get(plan_id)

    def get_plan(self, plan_id: str) -> Plan:
        plan = self.find_plan(plan_id)
        if plan is None:
            raise ValidationError(f"unknown plan '{plan_id}'")
        return plan

    def __contains__(self, plan_id: object) -> bool:
        return plan_id in self._plans_by_id

    def __len__(self) -> int:
        return len(self._plans)
