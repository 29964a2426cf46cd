"""Initialize the Flask app, its extensions and the board session."""

import atexit
import json
import os
import weakref

import firebase_admin
from firebase_admin import credentials
from flask import Flask

from .board.session import BoardSession
from .constants import COUNTDOWN_INTERVAL, WRITE_TIMEOUT
from .extensions import csrf
from .store import FirebaseStore, MemoryStore

# Sessions started by create_app, released together at interpreter exit
_live_sessions = weakref.WeakSet()


@atexit.register
def _shutdown():
    for board in list(_live_sessions):
        try:
            board.close()
        finally:
            board.store.close()


def _env_flag(name, default):
    value = os.environ.get(name)
    if not value:
        return default
    return value.lower() in ["true", "1", "t"]


def init_firebase(app):
    """Initialize the Firebase Admin SDK for the Realtime Database.

    Credentials are looked up in FIREBASE_CREDENTIALS_JSON, then in a
    firebase_credentials.json file next to the package, then in the
    application default credentials. Returns the Firebase app, or None if
    no credentials could be found.
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()

    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fallback to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )
            return None

    database_url = app.config.get("FIREBASE_DATABASE_URL")
    if not database_url and project_id:
        database_url = f"https://{project_id}-default-rtdb.firebaseio.com"

    firebase_options = {"databaseURL": database_url}
    if project_id:
        firebase_options["projectId"] = project_id

    try:
        return firebase_admin.initialize_app(cred, firebase_options)
    except ValueError:
        # This can happen if the app is already initialized, which is fine.
        app.logger.info("Firebase app already initialized.")
        return firebase_admin.get_app()


def create_store(app):
    """Build the remote store client selected by STORE_BACKEND."""
    if app.config.get("TESTING") or app.config["STORE_BACKEND"] == "memory":
        app.logger.info("Using in-memory board store.")
        return MemoryStore()
    return FirebaseStore(init_firebase(app))


def configure_app(app, test_config=None):
    """Load configuration from the environment, then apply ``test_config``."""
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        STORE_BACKEND=(os.environ.get("STORE_BACKEND") or "firebase").lower(),
        FIREBASE_DATABASE_URL=os.environ.get("FIREBASE_DATABASE_URL"),
        RESET_ON_FIRST_SNAPSHOT=_env_flag("RESET_ON_FIRST_SNAPSHOT", True),
        COUNTDOWN_INTERVAL=int(
            os.environ.get("COUNTDOWN_INTERVAL") or COUNTDOWN_INTERVAL
        ),
        WRITE_TIMEOUT=float(os.environ.get("WRITE_TIMEOUT") or WRITE_TIMEOUT),
    )

    if test_config:
        app.config.update(test_config)


def create_app(test_config=None, store=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(
        __name__,
        instance_relative_config=True,
        static_folder="static",
        static_url_path="/static",
    )
    configure_app(app, test_config)

    # Initialize extensions
    csrf.init_app(app)

    # Register blueprints
    from . import board as board_bp

    app.register_blueprint(board_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    # One board session per app, released with its store at interpreter exit
    if store is None:
        store = create_store(app)
    board = BoardSession(
        store,
        reset_on_first_snapshot=app.config["RESET_ON_FIRST_SNAPSHOT"],
        countdown_interval=app.config["COUNTDOWN_INTERVAL"],
    )
    board.start()
    app.extensions["board_store"] = store
    app.extensions["board_session"] = board
    _live_sessions.add(board)

    @app.context_processor
    def inject_version():
        """Injects the application version into the template context."""
        return dict(app_version=os.environ.get("APP_VERSION", "dev"))

    return app
