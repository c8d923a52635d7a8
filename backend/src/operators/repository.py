"""Data access helpers for operator persistence."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Operator, StaffRole


def create_operator(session: Session, *, name: str, role: StaffRole, active: bool = True) -> Operator:
    operator = Operator(name=name, role=role.value, active=active)
    session.add(operator)
    session.flush()
    return operator


def get_operator(session: Session, operator_id: int) -> Optional[Operator]:
    return session.get(Operator, operator_id)


def list_operators(session: Session, *, active_only: bool = False) -> list[Operator]:
    stmt = select(Operator).order_by(Operator.id)
    if active_only:
        stmt = stmt.where(Operator.active.is_(True))
    return list(session.scalars(stmt))


def delete_operator(session: Session, operator_id: int) -> bool:
    operator = session.get(Operator, operator_id)
    if operator is None:
        return False
    session.delete(operator)
    session.flush()
    return True
