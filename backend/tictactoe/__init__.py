from flask import Flask, jsonify, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

SECURITY_HEADERS = {
    'X-Frame-Options': 'DENY',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'geolocation=(), microphone=(), camera=()',
}


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from tictactoe.main import main
    flask_app.register_blueprint(main)

    from tictactoe.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api/auth')

    from tictactoe.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/game')

    from tictactoe.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    _register_error_handlers(flask_app)

    @flask_app.after_request
    def set_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    # Flask-Login user loader
    from tictactoe.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u, email=f'{u}@example.com')
                user.set_password('Password1!')
                db.session.add(user)

            db.session.commit()
            click.echo('Database has been reset and seeded!')

    @click.command('user-stats')
    @click.argument('username')
    def user_stats_command(username):
        """Prints the win/draw summary for one user."""
        from tictactoe.services.games import gateway
        from tictactoe.services.games.stats import summarize
        with flask_app.app_context():
            user = User.query.filter_by(username=username).first()
            if not user:
                raise click.ClickException(f'No such user: {username}')
            summary = summarize(gateway.list_all_by_user(user.id))
            for key, value in summary.to_dict().items():
                click.echo(f'{key}: {value}')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(user_stats_command)

    return flask_app


def _register_error_handlers(flask_app):
    from tictactoe.services.games.errors import DataIntegrityError

    @flask_app.errorhandler(DataIntegrityError)
    def handle_data_integrity_error(exc):
        if current_app.config.get('STRICT_DATA_INTEGRITY'):
            raise exc
        current_app.logger.error(f"[corrupt-data] {exc}")
        return jsonify({'error': 'Corrupt game history'}), 500
