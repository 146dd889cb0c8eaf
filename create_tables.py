import os
import sys

# Add the current directory to sys.path so we can import from app
sys.path.append(os.getcwd())

from app.database import engine, Base, SessionLocal
# Import all models to ensure they are registered with Base.metadata
from app.models import AdminUser, Barber, Booking, Payment, WorkingHours  # noqa: F401
from app.services.auth import AuthService
from app.services.working_hours_service import WorkingHoursService

def create_tables():
    print("Creating tables in database...")
    try:
        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            WorkingHoursService.seed_defaults(db)
            AuthService.seed_default_admin(db)
        finally:
            db.close()
        print("Tables created successfully:")
        for table in Base.metadata.tables:
            print(f"  - {table}")
        return True
    except Exception as e:
        print(f"Error creating tables: {e}")
        return False

if __name__ == "__main__":
    sys.exit(0 if create_tables() else 1)
