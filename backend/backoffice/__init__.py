from flask import Flask
from werkzeug.exceptions import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None


def _env_flag(name: str, default: str = '0') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['DEFAULT_GUARD_NAME'] = os.getenv('DEFAULT_GUARD_NAME', 'web')
    app.config['ALLOWED_GUARD_NAMES'] = tuple(
        g.strip() for g in os.getenv('ALLOWED_GUARD_NAMES', 'web,api').split(',') if g.strip()
    )
    app.config['ROLE_EDITOR_STRICT_NAMES'] = _env_flag('ROLE_EDITOR_STRICT_NAMES')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    from .routes.iam import iam_bp
    app.register_blueprint(iam_bp, url_prefix='/iam')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    from .errors import ValidationError, NotFoundError, ConflictError, GatewayError

    # Most specific first; unmapped errors (IllegalTransition included) fall through to 500
    error_statuses = (
        (ValidationError, 400, 'Bad Request'),
        (NotFoundError, 404, 'Not Found'),
        (ConflictError, 409, 'Conflict'),
        (GatewayError, 502, 'Bad Gateway'),
    )

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        mapped = next(((status, title) for cls, status, title in error_statuses if isinstance(e, cls)), None)
        if mapped:
            status, title = mapped
            payload = {'error': {'status': status, 'title': title, 'detail': str(e)}}
            if isinstance(e, ValidationError):
                payload['error']['fields'] = e.field_errors
            return payload, status
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()
