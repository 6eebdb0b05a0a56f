"""
Microblog Backend
Users, microposts, follows and the home feed.
"""
import os
import secrets
import sqlite3

from flask import Flask, current_app
from flask_bcrypt import Bcrypt
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine

# === LOGGING CONFIGURATION ===
from utils.logging_config import setup_logger
logger = setup_logger('microblog')

# === CONSTANTS ===
DEFAULT_DATABASE_URL = 'sqlite:///microblog.db'
DEFAULT_PER_PAGE = 30

# === INITIALIZE EXTENSIONS ===
db = SQLAlchemy()
bcrypt = Bcrypt()


@event.listens_for(Engine, 'connect')
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


class Services:
    """The service objects bound to one application"""

    def __init__(self, identity, posts, following, feed):
        self.identity = identity
        self.posts = posts
        self.following = following
        self.feed = feed


def load_config(app, config=None):
    """Populate app.config from the environment, then apply overrides"""
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', secrets.token_hex(32))

    database_url = os.environ.get('DATABASE_URL', DEFAULT_DATABASE_URL)
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url.replace('postgres://', 'postgresql://', 1)
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    app.config['BCRYPT_LOG_ROUNDS'] = int(os.environ.get('BCRYPT_LOG_ROUNDS', 12))
    # Pre-hash with SHA-256 so secrets past bcrypt's 72-byte limit are accepted
    app.config['BCRYPT_HANDLE_LONG_PASSWORDS'] = True
    app.config['MICROPOSTS_PER_PAGE'] = int(os.environ.get('MICROPOSTS_PER_PAGE', DEFAULT_PER_PAGE))
    app.config['USERS_PER_PAGE'] = int(os.environ.get('USERS_PER_PAGE', DEFAULT_PER_PAGE))

    app.config['ADMIN_EMAIL'] = os.environ.get('ADMIN_EMAIL', 'admin@microblog.local')
    app.config['ADMIN_PASSWORD'] = os.environ.get('ADMIN_PASSWORD', 'Admin123!')
    app.config['ADMIN_NAME'] = os.environ.get('ADMIN_NAME', 'Administrator')

    if config:
        app.config.update(config)

    if not app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
        app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', {
            'pool_size': 20,
            'pool_recycle': 3600,
            'pool_pre_ping': True,
            'max_overflow': 40,
            'pool_timeout': 30
        })


def create_app(config=None):
    """Application factory"""
    app = Flask(__name__)
    load_config(app, config)

    db.init_app(app)
    bcrypt.init_app(app)

    # === DATABASE MODELS (Import in correct order) ===
    from models.user import User
    from models.micropost import Micropost
    from models.relationship import Relationship

    # === SERVICE IMPORTS ===
    from services.following_service import FollowingService
    from services.post_service import PostService
    from services.identity_service import IdentityService
    from services.feed_service import FeedService
    from utils.security import CredentialVerifier

    # === INITIALIZE SERVICES ===
    verifier = CredentialVerifier(bcrypt)
    posts_per_page = app.config['MICROPOSTS_PER_PAGE']
    users_per_page = app.config['USERS_PER_PAGE']
    following_service = FollowingService(db, logger, per_page=users_per_page)
    post_service = PostService(db, logger, per_page=posts_per_page)
    identity_service = IdentityService(
        db, verifier, logger, post_service, following_service, per_page=users_per_page
    )
    feed_service = FeedService(db, following_service, logger, per_page=posts_per_page)

    app.extensions['microblog'] = Services(
        identity=identity_service,
        posts=post_service,
        following=following_service,
        feed=feed_service
    )

    logger.debug(f"Application created with database {app.config['SQLALCHEMY_DATABASE_URI']}")
    return app


def get_services(app=None):
    """Services bundle of the given app, or of the current one"""
    app = app or current_app
    return app.extensions['microblog']


def initialize_database(app):
    """Create all tables"""
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")
