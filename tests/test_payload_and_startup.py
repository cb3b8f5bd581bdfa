import os
import tempfile
import unittest

from checkin_service.app import create_app
from checkin_service.errors import InvalidArgument
from checkin_service.extensions import db
from checkin_service.services.payload import decode_payload, encode_payload


class TestPayload(unittest.TestCase):

    def test_round_trip(self):
        text = encode_payload('ab' * 32, 'S001')
        self.assertEqual(decode_payload(text), ('ab' * 32, 'S001'))

    def test_rejects_garbage(self):
        for text in ('not json', '[]', '{"token": "x"}', '{"token": 1, "studentId": "S001"}', None):
            with self.assertRaises(InvalidArgument) as ctx:
                decode_payload(text)
            self.assertEqual(ctx.exception.error_code, 'INVALID_PAYLOAD')


class TestStartupImport(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.db_uri = f"sqlite:///{os.path.join(self.tmpdir.name, 'checkin.db')}"
        self.csv_path = os.path.join(self.tmpdir.name, 'roster.csv')
        with open(self.csv_path, 'w', encoding='utf-8') as handle:
            handle.write(
                "Student ID,Name,Shirt Size,Food,Club,Involvement\n"
                "S001,Alice Tan,M,Normal,Chess,Member\n"
                "S002,Bob Lee,L,Halal,,\n"
            )

    def tearDown(self):
        self.tmpdir.cleanup()

    def make_app(self, path):
        return create_app({
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': self.db_uri,
            'ROSTER_CSV_PATH': path,
            'LOG_LEVEL': 'WARNING',
        })

    def test_imports_into_empty_database_once(self):
        app = self.make_app(self.csv_path)
        with app.app_context():
            self.assertEqual(app.extensions['checkin'].roster.count(), 2)
            app.extensions['checkin'].record_consent('S001', True)
            db.session.remove()

        # Second start finds data and leaves it alone
        app = self.make_app(self.csv_path)
        with app.app_context():
            self.assertTrue(app.extensions['checkin'].roster.find('S001').consented)
            db.session.remove()
            db.engine.dispose()

    def test_missing_file_stops_startup(self):
        with self.assertRaises(RuntimeError):
            self.make_app(os.path.join(self.tmpdir.name, 'missing.csv'))

    def test_cli_import(self):
        app = self.make_app(None)
        result = app.test_cli_runner().invoke(args=['import-roster', self.csv_path])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Imported 2 attendees', result.output)
        with app.app_context():
            db.engine.dispose()


if __name__ == '__main__':
    unittest.main()
