import os
import tempfile
import unittest

from checkin_service.app import create_app
from checkin_service.extensions import db
from checkin_service.services.consolidation import AttendeeRow


class AppTestCase(unittest.TestCase):
    """Fresh app on a throwaway SQLite file per test."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.tmpdir.name, 'checkin.db')
        self.app = create_app({
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': f"sqlite:///{self.db_path}",
            'ROSTER_CSV_PATH': None,
            'LOG_LEVEL': 'WARNING',
        })
        self.client = self.app.test_client()
        self.ctx = self.app.app_context()
        self.ctx.push()
        self.checkin = self.app.extensions['checkin']

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
        self.ctx.pop()
        self.tmpdir.cleanup()

    def add_attendee(self, identifier='S001', name='Alice Tan', size='M', meal='Normal', detail=''):
        return self.checkin.roster.upsert(AttendeeRow(
            identifier=identifier,
            name=name,
            garment_size=size,
            meal_preference=meal,
            organization_detail=detail,
        ))
