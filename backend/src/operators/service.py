"""Operator directory: the staff list used to sign radiation logs."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from db import session as db_session
from db.session import build_session_factory, session_scope
from records.errors import RecordStoreError

from . import repository
from .models import Base, OperatorDTO, StaffRole

logger = logging.getLogger(__name__)


class OperatorNotFoundError(LookupError):
    """Raised when an operator id does not exist."""


def _normalize_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Operator name must be provided")
    return cleaned


class OperatorDirectory:
    """Staff list persisted in its own table, independent of sessions and requests."""

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine) if engine is not None else None
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        try:
            Base.metadata.create_all(self._engine if self._engine is not None else db_session.engine)
        except SQLAlchemyError as exc:
            raise RecordStoreError("initialize operator table") from exc
        self._initialized = True

    def _scope(self):
        self._ensure_initialized()
        return session_scope(self._session_factory)

    def list_operators(self, *, active_only: bool = False) -> list[OperatorDTO]:
        try:
            with self._scope() as session:
                operators = repository.list_operators(session, active_only=active_only)
                return [OperatorDTO.model_validate(o) for o in operators]
        except SQLAlchemyError as exc:
            raise RecordStoreError("list operators") from exc

    def get_operator(self, operator_id: int) -> OperatorDTO:
        try:
            with self._scope() as session:
                operator = repository.get_operator(session, operator_id)
                if operator is None:
                    raise OperatorNotFoundError(f"Operator {operator_id} not found")
                return OperatorDTO.model_validate(operator)
        except SQLAlchemyError as exc:
            raise RecordStoreError("read operator") from exc

    def add_operator(self, name: str, role: StaffRole | str = StaffRole.TECHNICIAN, *, active: bool = True) -> OperatorDTO:
        name = _normalize_name(name)
        try:
            with self._scope() as session:
                operator = repository.create_operator(session, name=name, role=StaffRole(role), active=active)
                dto = OperatorDTO.model_validate(operator)
        except SQLAlchemyError as exc:
            raise RecordStoreError("add operator") from exc
        logger.info("event=operator_added operator_id=%s role=%s", dto.id, dto.role.value)
        return dto

    def update_operator(
        self,
        operator_id: int,
        *,
        name: Optional[str] = None,
        role: Optional[StaffRole | str] = None,
        active: Optional[bool] = None,
    ) -> OperatorDTO:
        try:
            with self._scope() as session:
                operator = repository.get_operator(session, operator_id)
                if operator is None:
                    raise OperatorNotFoundError(f"Operator {operator_id} not found")
                if name is not None:
                    operator.name = _normalize_name(name)
                if role is not None:
                    operator.role = StaffRole(role).value
                if active is not None:
                    operator.active = active
                session.flush()
                return OperatorDTO.model_validate(operator)
        except SQLAlchemyError as exc:
            raise RecordStoreError("update operator") from exc

    def deactivate(self, operator_id: int) -> OperatorDTO:
        return self.update_operator(operator_id, active=False)

    def remove_operator(self, operator_id: int) -> None:
        try:
            with self._scope() as session:
                if not repository.delete_operator(session, operator_id):
                    raise OperatorNotFoundError(f"Operator {operator_id} not found")
        except SQLAlchemyError as exc:
            raise RecordStoreError("remove operator") from exc

    def first_active_name(self) -> Optional[str]:
        """Name of the earliest registered active operator, if any."""
        active = self.list_operators(active_only=True)
        return active[0].name if active else None
