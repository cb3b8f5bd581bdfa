from checkin_service.extensions import db


class Credential(db.Model):
    __tablename__ = 'credentials'

    id = db.Column(db.Integer, primary_key=True)
    value = db.Column(db.Text, unique=True, nullable=False)
    attendee_identifier = db.Column(db.Text, nullable=False, index=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def to_dict(self):
        return {
            'token': self.value,
            'student_id': self.attendee_identifier,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
