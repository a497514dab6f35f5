"""Flask application factory."""
import logging

from flask import Flask, request
from flask_cors import CORS
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from tenantboard.database import init_db, is_unique_violation

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def configure_logging(app):
    """Apply LOG_LEVEL to the root, package and Flask loggers."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger('tenantboard').setLevel(level)
    app.logger.setLevel(level)


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    # Error tracking in production only
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import os
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # The frontend is served from its own origin
    CORS(app, resources={r"/api/*": {"origins": app.config.get('CORS_ORIGINS', '*')}})

    from tenantboard.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Production: trust the reverse proxy for client address and scheme
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    database = init_db(app)

    from tenantboard.middleware import load_principal

    @app.before_request
    def before_request_handler():
        """Log the request and resolve the caller's bearer token."""
        app.logger.info(f"Incoming request: {request.method} {request.path} from {request.remote_addr}")
        load_principal()

    # Error Handlers
    from tenantboard.exceptions import AppError
    from tenantboard.utils.responses import error_response

    @app.errorhandler(AppError)
    def handle_app_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"AppError [{error.status_code}] {error.code}: {error.message}")
        else:
            app.logger.info(f"AppError [{error.status_code}] {error.code}: {error.message}")
        return error.to_dict(), error.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        database.session.rollback()
        if is_unique_violation(error):
            # A unique index won a race the service-level checks could not see
            app.logger.warning(f"Integrity error: {error.orig}")
            return error_response('Resource already exists', 409, code='CONFLICT')
        app.logger.error(f"Integrity error: {error.orig}")
        return error_response('Internal server error', 500, code='INTERNAL_ERROR')

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 404:
            return error_response('Route not found', 404, code='NOT_FOUND')
        if error.code == 405:
            return error_response('Method not allowed', 405, code='METHOD_NOT_ALLOWED')
        return error_response(error.description or error.name, error.code)

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.exception(f"Unhandled Exception: {error}")
        database.session.rollback()
        return error_response('Internal server error', 500, code='INTERNAL_ERROR')

    # Register blueprints
    from tenantboard.blueprints.main import main_bp
    from tenantboard.blueprints.metrics import metrics_bp
    from tenantboard.blueprints.auth import auth_bp
    from tenantboard.blueprints.tenants import tenants_bp
    from tenantboard.blueprints.users import users_bp
    from tenantboard.blueprints.projects import projects_bp
    from tenantboard.blueprints.tasks import tasks_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(tenants_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(tasks_bp)

    from tenantboard.cli_commands import init_cli_commands
    init_cli_commands(app)

    return app
