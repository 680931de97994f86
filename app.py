import time
from typing import Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from pymongo.database import Database
from werkzeug.exceptions import HTTPException

from src.infrastructure.config import settings
from src.infrastructure.database import init_app as init_db
from pq_utils.logger_utils import logger

# Import Blueprints
from src.api.routes_quizzes import quizzes_bp


def create_app(db_conn: Optional[Database] = None):
    """
    Application factory for Flask.

    :param db_conn: Optional database to use instead of connecting to MONGO_URI.
    """
    app = Flask(__name__)

    # --- Core Configuration ---
    app.config.from_object(settings)
    # Keep insertion order in JSON bodies (scores are ordered by first contribution)
    app.json.sort_keys = False
    app.json.ensure_ascii = False

    CORS(app, resources={r"/api/*": {"origins": settings.CORS_ORIGINS}})

    # --- Initialize Extensions ---
    init_db(app, db_conn=db_conn)

    # --- Blueprints Registration ---
    app.register_blueprint(quizzes_bp, url_prefix='/api/quizzes')

    # --- Request Hooks ---
    @app.before_request
    def start_timer():
        g.request_started_at = time.perf_counter()

    @app.after_request
    def log_request(response):
        started_at = g.get('request_started_at')
        duration = time.perf_counter() - started_at if started_at is not None else 0.0
        logger.info(
            f"{request.method} {request.path} - Status: {response.status_code} - Duration: {duration:.3f}s"
        )
        return response

    # --- Health Check ---
    @app.route('/health')
    def health_check():
        return jsonify({"status": "ok"}), 200

    # --- Error Handling ---
    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        if error.code == 404:
            logger.warning(f"Not Found error for path: {request.path}")
        return jsonify({"error": error.name}), error.code

    @app.errorhandler(Exception)
    def handle_exception(error):
        logger.error(f"Unhandled exception for path {request.path}: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error"}), 500

    logger.info(f"Flask App created successfully in {settings.FLASK_ENV} mode.")
    return app

if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=settings.PORT, debug=settings.DEBUG)
