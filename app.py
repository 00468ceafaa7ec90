# Main Flask app
import atexit
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from auth import bcrypt, jwt
from config import config
from errors import ServiceError, error_response
from models import db
from routes import api_bp

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        return error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"message": error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        logger.exception('Unhandled error: %s', error)
        db.session.rollback()
        return jsonify({"message": "Internal server error."}), 500


def _dispose_engines(app):
    with app.app_context():
        for engine in db.engines.values():
            engine.dispose()


def create_app(config_name=None):
    config_name = config_name or os.environ.get('APP_CONFIG', 'default')
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    logging.basicConfig(level=app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})

    # Register blueprints
    app.register_blueprint(api_bp, url_prefix='/api')
    register_error_handlers(app)

    with app.app_context():
        db.create_all()

    if not app.testing:
        atexit.register(_dispose_engines, app)

    logger.info('MiniSocial API ready (%s config)', config_name)
    return app


if __name__ == '__main__':
    create_app().run(port=int(os.environ.get('PORT', 3000)))
