# app.py
"""
LedgerOne - Application Factory
Version: 1.0.0

Flask JSON API over a registry of record types (entities and the detail
records attached to them), the polymorphic entity_related_data links, a
relationship graph, global search and an audit trail.

STARTUP ORDER:
1. config + logging level
2. database (local backend) and record-type registry (validated)
3. data store backend + services -> app.extensions['ledgerone']
4. blueprints, JSON error handlers, CLI commands
"""
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import Config
from models.base import db
from modules.errors import LedgerError
from modules.registry import RecordTypeRegistry
from modules.services import EXTENSION_KEY, build_services
from modules.store import build_store


def create_app(config_object=Config):
    """Application factory pattern"""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Database
    db.init_app(app)

    # Registry is validated here; a bad RECORD_TYPES entry stops startup
    registry = RecordTypeRegistry.from_config()
    store = build_store(app.config, logger=app.logger)
    app.extensions[EXTENSION_KEY] = build_services(app, registry, store)
    app.logger.info("%s starting with %s store (%d record types)",
                    app.config.get('APP_NAME'), store.backend, len(registry.names()))

    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    if store.backend == 'sqlalchemy':
        with app.app_context():
            db.create_all()

    return app


def register_blueprints(app):
    """Register all module blueprints"""
    from modules.relationships import relationships_bp
    from modules.search import search_bp
    from modules.audit import audit_bp
    from modules.records import records_bp

    # Order matters only for readability; static segments always win over /api/<table>
    app.register_blueprint(relationships_bp)
    app.register_blueprint(search_bp)
    app.register_blueprint(audit_bp)
    app.register_blueprint(records_bp)


def register_error_handlers(app):

    @app.errorhandler(LedgerError)
    def handle_ledger_error(e):
        if e.status_code >= 500:
            app.logger.error("%s: %s | %s", type(e).__name__, e.message, e.details)
        else:
            app.logger.info("%s: %s", type(e).__name__, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description, 'kind': 'http'}), e.code


def register_commands(app):

    @app.cli.command('init-db')
    def init_db():
        """Create all tables for the local store."""
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command('check-coverage')
    def check_coverage():
        """Verify every registry field is a real column on its model."""
        from models import TABLE_MODELS

        services = app.extensions[EXTENSION_KEY]
        problems = coverage_problems(services.registry, TABLE_MODELS)
        for problem in problems:
            click.echo(f"  - {problem}")
        if problems:
            raise click.ClickException(f"{len(problems)} coverage problem(s) found")
        click.echo(f"All {len(services.registry.names())} record types covered.")

    @app.cli.command('clear-logs')
    @click.option('--days', type=int, default=None, help='Delete entries older than this many days.')
    def clear_logs(days):
        """Delete old audit log entries."""
        if days is None:
            days = app.config.get('AUDIT_LOG_RETENTION_DAYS', 30)
        removed = app.extensions[EXTENSION_KEY].audit.clear_old_logs(days)
        click.echo(f"Removed {removed} log entries older than {days} days.")


def coverage_problems(registry, table_models):
    """Registry fields that do not exist as columns, as readable messages."""
    problems = []
    for descriptor in registry:
        model = table_models.get(descriptor.name)
        if model is None:
            problems.append(f"{descriptor.name}: no model registered")
            continue
        columns = set(model.__table__.columns.keys())
        fields = set(descriptor.search_fields) | set(descriptor.subtitle_fields)
        fields.add(descriptor.display_field_candidates[0])
        if descriptor.parent_link:
            fields.add(descriptor.parent_link.foreign_key_field)
        for field in sorted(fields - columns):
            problems.append(f"{descriptor.name}: '{field}' is not a column")
    return problems


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=5000)
