import atexit
import threading
from typing import Optional

from flask import Flask, current_app
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from werkzeug.local import LocalProxy

from src.domain.errors import StoreUnavailableError
from src.infrastructure.repositories import ensure_indexes
from pq_utils.logger_utils import logger
from pq_utils.retry_utils import store_retry


def get_db() -> Database:
    """
    Returns the MongoDB database owned by the current Flask app.
    The client is created once by init_app and shared via app.extensions.
    """
    return current_app.extensions['mongo_db']


@store_retry
def _bootstrap(db: Database) -> None:
    db.command('ping')
    ensure_indexes(db)


def _bootstrap_in_background(app: Flask) -> None:
    try:
        _bootstrap(app.extensions['mongo_db'])
    except PyMongoError as e:
        # Requests keep failing fast with 503 until a later ping succeeds
        logger.error(f"MongoDB bootstrap failed: {e}", exc_info=True)
        return
    app.extensions['mongo_ready'].set()
    logger.info("MongoDB connected")


def init_app(app: Flask, db_conn: Optional[Database] = None) -> None:
    """
    Initialize the database with the Flask app.

    When ``db_conn`` is given (tests, scripts) it is used as is and considered
    ready. Otherwise a MongoClient is created from MONGO_URI and connected in
    a background thread so startup does not block on the store.
    """
    ready = threading.Event()
    app.extensions['mongo_ready'] = ready

    if db_conn is not None:
        app.extensions['mongo_client'] = None
        app.extensions['mongo_db'] = db_conn
        ready.set()
        return

    client = MongoClient(
        app.config['MONGO_URI'],
        serverSelectionTimeoutMS=app.config['MONGO_SERVER_SELECTION_TIMEOUT_MS'],
    )
    app.extensions['mongo_client'] = client
    # The database name is normally part of the MONGO_URI
    # e.g., mongodb://host:port/dbname
    app.extensions['mongo_db'] = client.get_default_database(default=app.config['MONGO_DB_NAME'])
    atexit.register(close_app, app)

    threading.Thread(
        target=_bootstrap_in_background,
        args=(app,),
        name="mongo-bootstrap",
        daemon=True,
    ).start()


def ensure_available() -> None:
    """
    Raise StoreUnavailableError unless MongoDB has answered at least once.

    Before the bootstrap finishes, one ping bounded by the server selection
    timeout decides, and the indexes are ensured before the store counts as
    ready (the bootstrap may have given up before creating them).
    """
    ready = current_app.extensions['mongo_ready']
    if ready.is_set():
        return
    try:
        db = get_db()
        db.command('ping')
        ensure_indexes(db)
    except PyMongoError as e:
        logger.warning(f"MongoDB not available: {e}")
        raise StoreUnavailableError("Database is not available, please retry later") from e
    ready.set()


def close_app(app: Flask) -> None:
    """Close the MongoClient owned by the app, if any."""
    client = app.extensions.get('mongo_client')
    if client is not None:
        client.close()
        app.extensions['mongo_client'] = None
        logger.info("MongoDB client closed")


# Use a LocalProxy to access the db connection within the application context
db = LocalProxy(get_db)
