# student_schema.py
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, Mapping, Optional, Union
from datetime import date, datetime


RecordId = Union[int, str]
# Raw date as delivered by the roster provider; parsed by the billing engine
RawDate = Optional[Union[date, str]]

# Status strings that mean the student has withdrawn (compared case-insensitively)
INACTIVE_STATUS_SENTINELS = frozenset({"baja", "inactive", "inactivo", "withdrawn"})


def status_is_active(status: Optional[str]) -> bool:
    if status is None:
        return True
    return str(status).strip().lower() not in INACTIVE_STATUS_SENTINELS


def _pick(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


class StudentSnapshot(BaseModel):
    """Read-only view of one roster record, as consumed by the billing engine."""

    id: RecordId
    organization_id: RecordId
    active: bool = True
    enrollment_date: RawDate = None
    last_payment_date: RawDate = None
    monthly_fee: Optional[float] = None
    full_name: Optional[str] = None
    # Contact details listed next to a student in the alert reports
    instrument: Optional[str] = None
    teacher_name: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("enrollment_date", "last_payment_date", mode="before")
    @classmethod
    def _drop_time_part(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        return value

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "StudentSnapshot":
        """
        Build a snapshot from a roster provider record.
        Accepts the engine field names as well as the legacy dashboard ones
        (estatus, fecha_inscripcion, fecha_ultimo_pago, empresa_id, clase, telefono ...).
        """
        active = _pick(record, "activeFlag", "active", "is_active")
        if active is None:
            active = status_is_active(_pick(record, "status", "estatus"))

        return cls(
            id=_pick(record, "id", "student_id", "alumno_id"),
            organization_id=_pick(record, "tenantId", "organization_id", "empresa_id"),
            active=active,
            enrollment_date=_pick(record, "enrollmentDate", "enrollment_date", "fecha_inscripcion"),
            last_payment_date=_pick(record, "lastPaymentDate", "last_payment_date", "fecha_ultimo_pago"),
            monthly_fee=_pick(record, "monthlyFee", "monthly_fee", "precio_mensual"),
            full_name=_pick(record, "full_name", "name", "nombre"),
            instrument=_pick(record, "instrument", "instrumento", "clase"),
            teacher_name=_pick(record, "teacher_name", "maestro"),
            phone=_pick(record, "phone", "telefono"),
        )
