"""
Claim Model — one row per attendee
Flags: garment_claimed | meal_claimed, each with the time it was set
"""

import enum

from checkin_service.errors import InvalidArgument
from checkin_service.extensions import db


class ItemKind(enum.Enum):
    GARMENT = "garment"
    MEAL = "meal"

    @property
    def flag(self):
        return f"{self.value}_claimed"

    @property
    def timestamp(self):
        return f"{self.value}_claimed_at"

    @classmethod
    def parse(cls, value):
        """Accept an ItemKind, its name, or the legacy ``tshirt`` alias."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "tshirt":
                return cls.GARMENT
            for kind in cls:
                if kind.value == key:
                    return kind
        raise InvalidArgument(
            "INVALID_ITEM_KIND",
            "item_type must be one of: tshirt, garment, meal",
        )


class ClaimResult(enum.Enum):
    CLAIMED = "claimed"
    ALREADY_CLAIMED = "already_claimed"


class Claim(db.Model):
    __tablename__ = "claims"

    id = db.Column(db.Integer, primary_key=True)
    attendee_identifier = db.Column(db.Text, unique=True, nullable=False)
    garment_claimed = db.Column(db.Boolean, nullable=False, default=False)
    garment_claimed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    meal_claimed = db.Column(db.Boolean, nullable=False, default=False)
    meal_claimed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), server_default=db.func.now())

    def to_dict(self):
        return {
            "student_id":        self.attendee_identifier,
            "tshirt_claimed":    bool(self.garment_claimed),
            "meal_claimed":      bool(self.meal_claimed),
            "tshirt_claimed_at": self.garment_claimed_at.isoformat() if self.garment_claimed_at else None,
            "meal_claimed_at":   self.meal_claimed_at.isoformat() if self.meal_claimed_at else None,
        }
