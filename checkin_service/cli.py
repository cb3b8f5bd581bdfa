import click
from flask import current_app


def import_on_startup(app):
    """
    Load the configured roster file when the attendee table is empty.
    A configured but missing file stops the application from starting.
    """
    path = app.config.get('ROSTER_CSV_PATH')
    if not path:
        return None

    roster = app.extensions['checkin'].roster
    existing = roster.count()
    if existing > 0:
        app.logger.info("Database already contains %d attendees. Skipping roster import.", existing)
        return None

    app.logger.info("Database is empty. Importing roster from %s", path)
    try:
        result = roster.import_file(path)
    except Exception as e:
        app.logger.error("Roster import failed on startup: %s", e)
        raise RuntimeError(f"Roster import failed: {e}") from e

    app.logger.info("Imported %d attendees from %s", result.imported_count, path)
    return result


def register_cli(app):

    @app.cli.command('import-roster')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def import_roster_command(path):
        """Import or re-import a roster CSV, consolidating duplicates."""
        result = current_app.extensions['checkin'].roster.import_file(path)
        click.echo(f"Imported {result.imported_count} attendees")
        for error in result.field_errors:
            click.echo(f"  Row {error.row}: Missing {', '.join(error.missing_fields)}")
