"""
Roster Service — Roster Store
Attendee lookup, whole-record upsert, consent updates and roster import
with duplicate consolidation.
"""

import csv
import io
import logging
import os
from dataclasses import dataclass, field
from typing import List

from checkin_service.errors import InvalidArgument
from checkin_service.models.attendee import Attendee
from checkin_service.models.claim import Claim
from checkin_service.services.consolidation import (
    AttendeeRow,
    build_organization_detail,
    consolidate,
    group_rows,
)

logger = logging.getLogger(__name__)

# Accepted column names per field, first non-blank wins.
# "Shirt Size2" is listed before "Shirt Size" because the export fills it
# with the corrected value.
COLUMN_ALIASES = {
    "identifier": ("identifier", "student_id", "Student ID"),
    "name": ("name", "Name"),
    "garment_size": ("garment_size", "tshirt_size", "Shirt Size2", "Shirt Size"),
    "meal_preference": ("meal_preference", "Food"),
    "organization_detail": ("organization_detail", "organization_details"),
    "club": ("club", "Club"),
    "involvement": ("involvement", "Involvement"),
}

# Names reported back to callers for missing fields
FIELD_LABELS = {
    "identifier": "student_id",
    "name": "name",
    "garment_size": "tshirt_size",
    "meal_preference": "meal_preference",
}


@dataclass
class FieldError:
    row: int
    missing_fields: List[str]

    def to_dict(self):
        return {"row": self.row, "missing_fields": list(self.missing_fields)}


@dataclass
class ImportResult:
    imported_count: int = 0
    field_errors: List[FieldError] = field(default_factory=list)

    def to_dict(self):
        return {
            "imported_count": self.imported_count,
            "field_errors": [e.to_dict() for e in self.field_errors],
        }


def _pick(record, key):
    for alias in COLUMN_ALIASES[key]:
        value = record.get(alias)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return ""


def _read_records(source):
    """Yield mappings from CSV text, a file object, or an iterable of dicts."""
    if isinstance(source, bytes):
        source = source.decode("utf-8-sig")
    if isinstance(source, str):
        source = io.StringIO(source.lstrip("\ufeff"))
    if hasattr(source, "read"):
        source = csv.DictReader(source)

    for record in source:
        if not any(str(v).strip() for v in record.values() if v is not None and not isinstance(v, list)):
            continue
        yield record


def parse_roster(source):
    """
    Turn tabular roster input into attendee rows.

    Rows missing an identifier or name are rejected. Size and meal are
    required for the first accepted row of each identifier; later rows for
    the same identifier only add involvement detail and may leave them
    blank. Returns ``(rows, field_errors)``; nothing is raised for bad data.
    """
    rows = []
    errors = []
    seen = set()

    for number, record in enumerate(_read_records(source), start=1):
        values = {key: _pick(record, key) for key in COLUMN_ALIASES}

        required = ["identifier", "name"]
        if values["identifier"].lower() not in seen:
            required += ["garment_size", "meal_preference"]

        missing = [FIELD_LABELS[key] for key in required if not values[key]]
        if missing:
            errors.append(FieldError(row=number, missing_fields=missing))
            continue

        detail = values["organization_detail"] or build_organization_detail(
            values["club"], values["involvement"]
        )
        rows.append(AttendeeRow(
            identifier=values["identifier"],
            name=values["name"],
            garment_size=values["garment_size"],
            meal_preference=values["meal_preference"],
            organization_detail=detail,
        ))
        seen.add(values["identifier"].lower())

    return rows, errors


class RosterStore:
    def __init__(self, db):
        self.db = db

    def find(self, identifier):
        """Case-insensitive, whitespace-trimmed lookup. Returns None when absent."""
        if not identifier or not str(identifier).strip():
            return None
        key = str(identifier).strip().lower()
        return Attendee.query.filter(self.db.func.lower(Attendee.identifier) == key).first()

    def count(self):
        return Attendee.query.count()

    def upsert(self, row: AttendeeRow, commit=True):
        """Insert the row, or overwrite every field of the existing attendee."""
        attendee = self.find(row.identifier)
        if attendee is None:
            attendee = Attendee(identifier=row.identifier.strip())
            self.db.session.add(attendee)

        attendee.name = row.name
        attendee.garment_size = row.garment_size
        attendee.meal_preference = row.meal_preference
        attendee.organization_detail = row.organization_detail or None
        attendee.consented = row.consented

        if commit:
            try:
                self.db.session.commit()
            except Exception:
                self.db.session.rollback()
                raise
        else:
            self.db.session.flush()
        return attendee

    def update_consent(self, identifier, consented):
        if not isinstance(consented, bool):
            raise InvalidArgument("INVALID_FLAG", "consented must be a boolean")

        attendee = self.find(identifier)
        if attendee is None:
            return None

        attendee.consented = consented
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise
        logger.info("Recorded consent=%s for %s", consented, attendee.identifier)
        return attendee

    def all_with_claims(self):
        """Every attendee with its claim flags; attendees without a claim row read as unclaimed."""
        pairs = (
            self.db.session.query(Attendee, Claim)
            .outerjoin(Claim, Claim.attendee_identifier == Attendee.identifier)
            .order_by(Attendee.identifier.asc())
            .all()
        )

        students = []
        for attendee, claim in pairs:
            data = attendee.to_dict()
            data["tshirt_claimed"] = bool(claim.garment_claimed) if claim else False
            data["meal_claimed"] = bool(claim.meal_claimed) if claim else False
            students.append(data)
        return students

    def import_rows(self, source) -> ImportResult:
        rows, errors = parse_roster(source)

        for error in errors:
            logger.warning("Roster row %d skipped: missing %s", error.row, ", ".join(error.missing_fields))

        result = ImportResult(field_errors=errors)
        try:
            for key, group in group_rows(rows).items():
                if len(group) > 1:
                    logger.info("Consolidated %d records for %s", len(group), key)
                self.upsert(consolidate(group), commit=False)
                result.imported_count += 1
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

        logger.info("Imported %d attendees (%d rows skipped)", result.imported_count, len(errors))
        return result

    def import_file(self, path) -> ImportResult:
        if not os.path.exists(path):
            raise FileNotFoundError(f"Roster file not found at path: {path}")
        with open(path, encoding="utf-8-sig", newline="") as handle:
            return self.import_rows(handle)
