"""Typer application entrypoint."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, NoReturn, Optional

import typer
from rich import print as rprint
from rich.table import Table

from api.dependencies import Services, build_services
from exposure import BitewingSide, BodyType, Gender, IMAGING_LABELS, ImagingType
from logging_config import configure_logging
from operators.models import StaffRole
from operators.service import OperatorNotFoundError
from patients.errors import PatientNotFoundError
from records.errors import RecordStoreError
from records.models import ImagingRequestDTO, RequestStatus, validate_iso_date
from scheduling.errors import (
    IncompleteRadiationLogError,
    RequestNotFoundError,
    RequestStateError,
    RequestValidationError,
)
from scheduling.models import ClinicIdentity, CreateRequestPayload
from stats import HistoryFilter, PeriodPreset, compute_period_stats, filter_history, resolve_period


configure_logging()


app = typer.Typer(help="Dental radiography scheduling CLI")
patients_app = typer.Typer(help="Browse and maintain patient records")
requests_app = typer.Typer(help="Create and complete imaging requests")
operators_app = typer.Typer(help="Manage the operator directory")

app.add_typer(patients_app, name="patients")
app.add_typer(requests_app, name="requests")
app.add_typer(operators_app, name="operators")

_SERVICES: Optional[Services] = None


def _build_services() -> Services:
    global _SERVICES
    if _SERVICES is None:
        _SERVICES = build_services()
    return _SERVICES


def _fail(message: str) -> NoReturn:
    rprint(f"[red]{message}[/red]")
    raise typer.Exit(code=1)


def _parse_exposure(value: str) -> tuple[ImagingType, dict[str, float]]:
    """Parse ``TYPE:kv=70,ma=10,sec=12`` into a type and exposure edits."""
    try:
        type_part, _, settings_part = value.partition(":")
        imaging_type = ImagingType(type_part.strip().upper())
        edits: dict[str, float] = {}
        for item in filter(None, (part.strip() for part in settings_part.split(","))):
            key, _, number = item.partition("=")
            key = key.strip().lower()
            if key not in {"kv", "ma", "sec"}:
                raise ValueError(f"unknown setting '{key}'")
            edits[key] = float(number)
    except ValueError as exc:
        raise typer.BadParameter(f"{value!r}: {exc}") from exc
    return imaging_type, edits


def _requests_table(title: str, requests: list[ImagingRequestDTO]) -> Table:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Patient")
    table.add_column("Age", justify="right")
    table.add_column("Types")
    table.add_column("Points", justify="right")
    table.add_column("Status")
    table.add_column("Operator")
    for request in requests:
        logs = list(request.radiation_logs.values())
        table.add_row(
            request.id[:8],
            request.scheduled_date,
            request.scheduled_time,
            f"{request.patient_name} ({request.patient_id})",
            str(request.patient_age_at_request),
            ", ".join(IMAGING_LABELS[t] for t in request.types),
            str(request.points),
            request.status.value,
            logs[0].operator_name if logs else "-",
        )
    return table


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except RecordStoreError as exc:
        _fail(f"Database error: {exc}")


def _parse_date(label: str, value: Optional[str]) -> Optional[str]:
    """Check a ``YYYY-MM-DD`` option; bounds are compared as strings downstream."""
    if value is None:
        return None
    try:
        return validate_iso_date(value)
    except ValueError:
        _fail(f"{label} must use the YYYY-MM-DD format, got {value!r}")


@app.command("init-db")
def init_db() -> None:
    """Create the database tables if they do not exist."""
    services = _build_services()
    try:
        services.store.list_patients()
        services.operators.list_operators()
    except RecordStoreError as exc:
        _fail(f"Database initialization failed: {exc}")
    typer.echo("Database ready.")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind"),
    port: int = typer.Option(8000, help="Port to listen on"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from api.server import create_app

    uvicorn.run(create_app(), host=host, port=port)


@patients_app.command("list")
def patients_list() -> None:
    """List patients ordered by name."""
    with _store_errors():
        patients = _build_services().patients.list_patients()
    table = Table(title="Patients")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Gender")
    table.add_column("Birthday")
    table.add_column("Body type")
    for patient in patients:
        table.add_row(patient.id, patient.name, patient.gender.value, patient.birthday, patient.body_type.value)
    rprint(table)


@patients_app.command("show")
def patients_show(patient_id: str) -> None:
    """Show a patient with completed and upcoming requests."""
    services = _build_services()
    with _store_errors():
        patient = services.patients.get_patient(patient_id)
        if patient is None:
            _fail("Patient not found")
        requests = [r for r in services.requests.list_requests() if r.patient_id == patient.id]
    rprint(f"[bold]{patient.name}[/bold] ({patient.id}) {patient.gender.value}, born {patient.birthday}, {patient.body_type.value}")
    rprint(_requests_table("Imaging history", [r for r in requests if r.status == RequestStatus.COMPLETED]))
    pending = [r for r in requests if r.status == RequestStatus.PENDING]
    if pending:
        rprint(_requests_table("Upcoming", pending))


@patients_app.command("delete")
def patients_delete(
    patient_id: str,
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt"),
) -> None:
    """Delete a patient record. Past imaging requests are kept."""
    confirmed = yes or typer.confirm(f"Delete patient {patient_id}? This cannot be undone.")
    if not confirmed:
        typer.echo("Aborted.")
        raise typer.Exit(code=1)
    try:
        with _store_errors():
            _build_services().patients.delete_patient(patient_id, confirmed=True)
    except PatientNotFoundError:
        _fail("Patient not found")
    typer.echo(f"Deleted patient {patient_id}")


@requests_app.command("create")
def requests_create(
    patient_id: str = typer.Option(..., "--patient-id"),
    name: str = typer.Option(..., "--name"),
    birthday: str = typer.Option(..., "--birthday", help="YYYY-MM-DD"),
    gender: Gender = typer.Option(Gender.MALE, "--gender"),
    body_type: BodyType = typer.Option(BodyType.NORMAL, "--body-type"),
    types: List[ImagingType] = typer.Option([], "--type", help="Repeat for several imaging types"),
    sides: List[BitewingSide] = typer.Option([], "--side", help="Bitewing side; repeat for both"),
    teeth: List[int] = typer.Option([], "--tooth", help="FDI tooth number; repeatable"),
    notes: str = typer.Option("", "--notes"),
    scheduled_date: Optional[str] = typer.Option(None, "--date", help="YYYY-MM-DD, defaults to today"),
    scheduled_time: Optional[str] = typer.Option(None, "--time", help="HH:MM, defaults to now"),
    location_to: Optional[str] = typer.Option(None, "--to", help="Where the patient goes next"),
) -> None:
    """Create a pending imaging request."""
    payload = CreateRequestPayload(
        patient_id=patient_id,
        patient_name=name,
        patient_gender=gender,
        patient_birthday=birthday,
        patient_body_type=body_type,
        types=types,
        selected_teeth=teeth,
        bitewing_sides=sides,
        notes=notes,
        scheduled_date=scheduled_date,
        scheduled_time=scheduled_time,
    )
    if location_to:
        payload.location_to = location_to
    try:
        request = _build_services().requests.create_request(payload)
    except RequestValidationError as exc:
        _fail(exc.message)
    except RecordStoreError as exc:
        _fail(f"Could not save the request: {exc}")
    typer.echo(f"Created request {request.id} ({request.points} points)")


@requests_app.command("list")
def requests_list(
    status: Optional[RequestStatus] = typer.Option(None, "--status"),
) -> None:
    """List requests, newest first."""
    with _store_errors():
        requests = _build_services().requests.list_requests(status)
    rprint(_requests_table("Requests", requests))


@requests_app.command("complete")
def requests_complete(
    request_id: str,
    staff: Optional[str] = typer.Option(None, "--staff", help="Signed-in staff name"),
    operator: Optional[str] = typer.Option(None, "--operator", help="Operator name for every log"),
    exposure: List[str] = typer.Option([], "--exposure", help="TYPE:kv=..,ma=..,sec=..; repeatable"),
) -> None:
    """Record radiation logs (template defaults unless overridden) and complete the request."""
    exposures = dict(_parse_exposure(value) for value in exposure)
    identity = ClinicIdentity(staff_name=staff) if staff else None
    try:
        with _store_errors():
            request = _build_services().requests.complete_request(
                request_id,
                identity=identity,
                exposures=exposures,
                operator_name=operator,
            )
    except RequestNotFoundError:
        _fail("Request not found")
    except (RequestStateError, IncompleteRadiationLogError, ValueError) as exc:
        _fail(str(exc))
    table = Table(title=f"Radiation logs for {request.id[:8]}")
    table.add_column("Type")
    table.add_column("kV", justify="right")
    table.add_column("mA", justify="right")
    table.add_column("sec", justify="right")
    table.add_column("Operator")
    for imaging_type, log in request.radiation_logs.items():
        table.add_row(IMAGING_LABELS[imaging_type], f"{log.kv:g}", f"{log.ma:g}", f"{log.sec:g}", log.operator_name)
    rprint(table)


@app.command()
def history(
    query: str = typer.Option("", "--query", "-q", help="Patient name or id"),
    date_from: Optional[str] = typer.Option(None, "--from", help="YYYY-MM-DD"),
    date_to: Optional[str] = typer.Option(None, "--to", help="YYYY-MM-DD"),
    imaging_type: Optional[ImagingType] = typer.Option(None, "--type"),
) -> None:
    """Search completed requests."""
    criteria = HistoryFilter(
        query=query.strip(),
        date_from=_parse_date("--from", date_from),
        date_to=_parse_date("--to", date_to),
        imaging_type=imaging_type,
    )
    with _store_errors():
        items = filter_history(_build_services().requests.list_requests(), criteria)
    rprint(_requests_table(f"History ({len(items)})", items))


@app.command()
def stats(
    preset: PeriodPreset = typer.Option(PeriodPreset.TODAY, "--preset"),
    date_from: Optional[str] = typer.Option(None, "--from", help="YYYY-MM-DD"),
    date_to: Optional[str] = typer.Option(None, "--to", help="YYYY-MM-DD"),
    today: Optional[str] = typer.Option(None, "--today", help="Reference date, defaults to the current date"),
) -> None:
    """Summarize completed and pending requests for a period."""
    date_from = _parse_date("--from", date_from)
    date_to = _parse_date("--to", date_to)
    today = _parse_date("--today", today)
    services = _build_services()
    try:
        start, end = resolve_period(
            preset,
            today=date.fromisoformat(today) if today else None,
            date_from=date_from,
            date_to=date_to,
        )
    except ValueError as exc:
        _fail(str(exc))
    with _store_errors():
        requests = services.requests.list_requests()
    result = compute_period_stats(
        requests,
        start,
        end,
        attribution=services.stats_settings.operator_attribution,
    )

    rprint(f"[bold]{start} .. {end}[/bold]")
    rprint(f"Completed: {result.total_count} / {result.total_period}")
    rprint(f"Total points: {result.total_points}")
    rprint(f"Average points: {result.average_points}")
    rprint(f"Pending: {result.pending_count}")

    type_table = Table(title="By imaging type")
    type_table.add_column("Type")
    type_table.add_column("Count", justify="right")
    for imaging_type, count in result.by_type.items():
        if count:
            type_table.add_row(IMAGING_LABELS[imaging_type], str(count))
    rprint(type_table)

    operator_table = Table(title="By operator")
    operator_table.add_column("Operator")
    operator_table.add_column("Count", justify="right")
    for name, count in result.by_operator:
        operator_table.add_row(name, str(count))
    rprint(operator_table)


@operators_app.command("list")
def operators_list() -> None:
    """List operators."""
    with _store_errors():
        operators = _build_services().operators.list_operators()
    table = Table(title="Operators")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Role")
    table.add_column("Active")
    for operator in operators:
        table.add_row(str(operator.id), operator.name, operator.role.value, "yes" if operator.active else "no")
    rprint(table)


@operators_app.command("add")
def operators_add(
    name: str,
    role: StaffRole = typer.Option(StaffRole.TECHNICIAN, "--role"),
) -> None:
    """Register an operator."""
    try:
        with _store_errors():
            operator = _build_services().operators.add_operator(name, role)
    except ValueError as exc:
        _fail(str(exc))
    typer.echo(f"Added operator {operator.id}: {operator.name}")


@operators_app.command("deactivate")
def operators_deactivate(operator_id: int) -> None:
    """Mark an operator inactive; their past logs are unchanged."""
    try:
        with _store_errors():
            operator = _build_services().operators.deactivate(operator_id)
    except OperatorNotFoundError:
        _fail("Operator not found")
    typer.echo(f"Deactivated operator {operator.id}: {operator.name}")


if __name__ == "__main__":
    app()
