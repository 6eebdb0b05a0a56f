"""Initialize database for the microblog: tables, admin user and optional sample data"""
import os
import sys

# Add current directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from microblog_backend import create_app, db, get_services, logger


def init_database(app, sample=False):
    """Initialize database with tables and default data"""
    from utils.db_init import create_admin_user, populate_sample_data

    with app.app_context():
        print("Creating database tables (preserving existing data)...")
        db.create_all()

        services = get_services(app)
        create_admin_user(db, services.identity, app.config)

        if sample:
            print("Populating sample data...")
            populate_sample_data(services)

        logger.info("Database initialized successfully")


if __name__ == '__main__':
    init_database(
        create_app(),
        sample=bool(os.environ.get('SEED_SAMPLE_DATA')) and not os.environ.get('PRODUCTION')
    )
