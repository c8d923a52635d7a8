from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from operators.models import StaffRole
from operators.service import OperatorDirectory, OperatorNotFoundError


def _setup_directory() -> OperatorDirectory:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return OperatorDirectory(engine)


def test_add_and_list_operators():
    directory = _setup_directory()
    ito = directory.add_operator("  Ito  ")
    kato = directory.add_operator("Kato", "doctor")

    assert ito.name == "Ito"
    assert ito.role is StaffRole.TECHNICIAN
    assert kato.role is StaffRole.DOCTOR
    assert [o.name for o in directory.list_operators()] == ["Ito", "Kato"]


def test_blank_name_rejected():
    directory = _setup_directory()
    with pytest.raises(ValueError):
        directory.add_operator("   ")


def test_deactivated_operators_are_not_offered_first():
    directory = _setup_directory()
    assert directory.first_active_name() is None

    ito = directory.add_operator("Ito")
    directory.add_operator("Ueda", StaffRole.HYGIENIST)
    assert directory.first_active_name() == "Ito"

    directory.deactivate(ito.id)
    assert directory.first_active_name() == "Ueda"
    assert [o.name for o in directory.list_operators(active_only=True)] == ["Ueda"]
    assert len(directory.list_operators()) == 2


def test_update_and_remove():
    directory = _setup_directory()
    operator = directory.add_operator("Ito")

    updated = directory.update_operator(operator.id, name="Ito Ken", role="hygienist")
    assert updated.name == "Ito Ken"
    assert updated.role is StaffRole.HYGIENIST
    assert directory.get_operator(operator.id).name == "Ito Ken"

    directory.remove_operator(operator.id)
    with pytest.raises(OperatorNotFoundError):
        directory.get_operator(operator.id)
    with pytest.raises(OperatorNotFoundError):
        directory.remove_operator(operator.id)
