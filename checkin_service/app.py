"""
Check-in Service — Flask application
Roster validation, scan tokens and one-time item claims.
"""

import os
from datetime import datetime, timezone

from dotenv import load_dotenv
from flasgger import Swagger
from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from checkin_service.cli import import_on_startup, register_cli
from checkin_service.errors import CheckinError
from checkin_service.extensions import db
from checkin_service.logging_config import configure_logging, register_request_logging
from checkin_service.routes import checkin_bp, distribution_bp, students_bp
from checkin_service.services.orchestrator import CheckinOrchestrator

load_dotenv()


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']

    db_user = os.environ.get('DB_USER', 'checkin_user')
    db_pass = os.environ.get('DB_PASS', 'password')
    db_host = os.environ.get('DB_HOST', 'checkin-db')
    db_name = os.environ.get('DB_NAME', 'checkin_db')
    return f"postgresql://{db_user}:{db_pass}@{db_host}/{db_name}"


def create_app(config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_uri()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['ROSTER_CSV_PATH'] = os.environ.get('ROSTER_CSV_PATH')
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')
    if config:
        app.config.update(config)

    configure_logging(app.config['LOG_LEVEL'])

    # Initialize Extensions
    db.init_app(app)
    app.extensions['checkin'] = CheckinOrchestrator.from_db(db)

    Swagger(app)

    # Register Blueprints
    app.register_blueprint(checkin_bp, url_prefix='/api')
    app.register_blueprint(distribution_bp, url_prefix='/api')
    app.register_blueprint(students_bp, url_prefix='/api')

    register_request_logging(app)
    register_cli(app)

    @app.errorhandler(CheckinError)
    def handle_checkin_error(e):
        if e.status_code >= 500:
            app.logger.error("%s: %s", e.error_code, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        db.session.rollback()
        app.logger.exception("Database error")
        return jsonify({
            'success': False,
            'error_code': 'DATABASE_ERROR',
            'message': 'Database error',
        }), 500

    # --- Health check ---------------------------------------------------
    @app.route('/health')
    def health():
        try:
            db.session.execute(db.text('SELECT 1'))
            return jsonify({
                "service": "checkin-service",
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except Exception as e:
            return jsonify({"service": "checkin-service", "status": "unhealthy", "error": str(e)}), 503

    with app.app_context():
        db.create_all()
        import_on_startup(app)

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=5000)
