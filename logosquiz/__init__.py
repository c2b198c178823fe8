from flask import Flask, request, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from dotenv import load_dotenv
from flask_migrate import Migrate
from flask_compress import Compress

# Load environment variables early so config is available for blueprint creation
load_dotenv()

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
compress = Compress()


def _is_api_path(path: str) -> bool:
    from logosquiz.config import get_config
    return path.startswith(get_config().API_PREFIX + '/')


def create_app() -> Flask:
    """
    Application factory for the Flask app.
    Loads environment variables, configures the database,
    and registers the quiz blueprint.
    """
    # Re-initialize config to ensure latest .env values are loaded
    from logosquiz.config import reload_config
    config = reload_config()

    # Validate configuration
    config.validate()

    app = Flask(__name__)

    # Load configuration from config module
    app.config["SECRET_KEY"] = config.SECRET_KEY
    db_uri = config.SQLALCHEMY_DATABASE_URI
    if config.uses_mysql and "?" not in db_uri:
        db_uri += "?charset=utf8mb4"
    app.config["SQLALCHEMY_DATABASE_URI"] = db_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = config.SQLALCHEMY_TRACK_MODIFICATIONS
    app.config["SQLALCHEMY_ECHO"] = config.SQLALCHEMY_ECHO
    if config.uses_mysql:
        # Connection pooling only makes sense for the MySQL server backend
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "max_overflow": 20,
            "connect_args": {
                "connect_timeout": 5,
                "read_timeout": 10,
                "write_timeout": 10,
                "charset": "utf8mb4",
            }
        }

    # Response compression settings
    app.config["COMPRESS_MIMETYPES"] = ['application/json']
    app.config["COMPRESS_LEVEL"] = 6
    app.config["COMPRESS_MIN_SIZE"] = 500
    app.config["SESSION_COOKIE_SECURE"] = config.SESSION_COOKIE_SECURE
    app.config["SESSION_COOKIE_HTTPONLY"] = config.SESSION_COOKIE_HTTPONLY
    app.config["SESSION_COOKIE_SAMESITE"] = config.SESSION_COOKIE_SAMESITE

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    compress.init_app(app)

    from logosquiz.security import init_security
    init_security(app)

    @login_manager.user_loader
    def load_user(user_id):
        from logosquiz.auth.models import User
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        app.logger.warning(f"Unauthenticated request: {request.method} {request.path}")
        return jsonify({'success': False, 'error': 'Authentication required'}), 401

    @app.route("/health")
    def health():
        return jsonify({'success': True, 'status': 'ok'}), 200

    # Register quiz blueprint
    from logosquiz.quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    @app.errorhandler(404)
    def handle_404(e):
        """Handle 404 errors - return JSON for API routes."""
        path = request.path
        app.logger.warning(f"404 error: {request.method} {path}")
        if _is_api_path(path):
            return jsonify({
                'success': False,
                'error': f'Route not found: {request.method} {path}',
                'path': path,
                'method': request.method
            }), 404
        return f"Page not found: {path}", 404

    @app.errorhandler(405)
    def handle_405(e):
        """Handle 405 Method Not Allowed - return JSON for API routes."""
        path = request.path
        app.logger.warning(f"405 error: {request.method} {path}")
        if _is_api_path(path):
            return jsonify({
                'success': False,
                'error': f'Method not allowed: {request.method} {path}',
                'path': path,
                'method': request.method
            }), 405
        return e

    @app.errorhandler(500)
    def handle_500(e):
        app.logger.error(f"500 error: {request.method} {request.path}")
        return jsonify({'success': False, 'error': 'Internal server error', 'kind': 'INTERNAL_ERROR'}), 500

    # Create tables if they do not exist
    with app.app_context():
        from logosquiz.auth.models import User  # noqa: F401
        from logosquiz.quiz import models  # noqa: F401
        db.create_all()

    return app
