from checkin_service.extensions import db


class Attendee(db.Model):
    __tablename__ = 'attendees'

    id = db.Column(db.Integer, primary_key=True)
    identifier = db.Column(db.Text, unique=True, nullable=False)
    name = db.Column(db.Text, nullable=False)
    garment_size = db.Column(db.Text)
    meal_preference = db.Column(db.Text)
    organization_detail = db.Column(db.Text)
    consented = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    # Identifier uniqueness ignores case; lookups go through LOWER() as well
    __table_args__ = (
        db.Index('uq_attendees_identifier_lower', db.func.lower(identifier), unique=True),
    )

    def to_dict(self):
        return {
            'student_id': self.identifier,
            'name': self.name,
            'tshirt_size': self.garment_size or '',
            'meal_preference': self.meal_preference or '',
            'organization_details': self.organization_detail or '',
            'consented': bool(self.consented),
        }
