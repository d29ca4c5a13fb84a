# scripts/setup/init_db.py
"""
Initialize database: creates all tables and seeds demo data.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py [--no-seed]
"""

import sys
import os
import argparse
import random
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from datetime import datetime, timedelta, timezone
from app.database import create_tables, engine, session_scope
from app.config import settings
from app.models.favorite import Favorite
from app.models.location import Location
from app.models.sensor import Sensor
from app.models.study_plan import StudyPlan
from app.models.user import User, ROLE_ADMIN, ROLE_USER
from sqlalchemy import inspect, text

SEED_USERS = [
    {"name": "Admin", "email": "admin@ghentstudyspots.be", "role": ROLE_ADMIN},
    {"name": "Test Student", "email": "student@ugent.be", "role": ROLE_USER},
]

SAMPLE_LOCATIONS = [
    {
        "external_id": "sample-1",
        "name": "Boekentoren UGent",
        "address": "Rozier 9, 9000 Gent",
        "latitude": 51.0425,
        "longitude": 3.7255,
        "capacity": 200,
        "description": "Historische bibliotheek van de Universiteit Gent",
        "type": "bibliotheek",
    },
    {
        "external_id": "sample-2",
        "name": "Blokspot Sint-Pietersplein",
        "address": "Sint-Pietersplein 6, 9000 Gent",
        "latitude": 51.0393,
        "longitude": 3.7247,
        "capacity": 100,
        "description": "Rustige studieruimte voor studenten",
        "type": "studiezaal",
    },
    {
        "external_id": "sample-3",
        "name": "Bibliotheek Tweebronnen",
        "address": "Jozef Plateaustraat 40, 9000 Gent",
        "latitude": 51.0479,
        "longitude": 3.7229,
        "capacity": 80,
        "description": "Moderne bibliotheek met studieplaatsen",
        "type": "bibliotheek",
    },
]


def seed(db):
    users = {}
    for data in SEED_USERS:
        user = db.query(User).filter(User.email == data["email"]).first()
        if not user:
            user = User(**data)
            db.add(user)
            db.flush()
        users[data["role"]] = user
        print(f"✅ User: {user.email} (id={user.id}, role={user.role})")

    for data in SAMPLE_LOCATIONS:
        location = db.query(Location).filter(Location.external_id == data["external_id"]).first()
        if location:
            for key, value in data.items():
                setattr(location, key, value)
        else:
            location = Location(**data)
            db.add(location)
        if location.sensor is None:
            location.sensor = Sensor(
                current_noise_level=random.randint(20, 69),
                current_occupancy=int(random.random() * location.capacity * 0.7),
            )
        print(f"✅ Location with sensor: {location.name}")
    db.flush()

    student = users[ROLE_USER]
    first_location = db.query(Location).order_by(Location.id).first()
    if first_location:
        exists = db.query(Favorite).filter(
            Favorite.user_id == student.id, Favorite.location_id == first_location.id
        ).first()
        if not exists:
            db.add(Favorite(user_id=student.id, location_id=first_location.id))
            print("✅ Sample favorite")

        tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).replace(
            hour=9, minute=0, second=0, microsecond=0
        )
        db.add(StudyPlan(user_id=student.id, location_id=first_location.id,
                         start_time=tomorrow, end_time=tomorrow.replace(hour=12),
                         notes="Studeren voor examens"))
        print("✅ Sample study plan")

    db.commit()


def main():
    parser = argparse.ArgumentParser(description="Create tables and seed demo data")
    parser.add_argument("--no-seed", action="store_true", help="Only create tables")
    args = parser.parse_args()

    print("🗄️  Study Spots DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if not args.no_seed:
        print("\n🌱 Seeding demo data...")
        with session_scope() as db:
            seed(db)

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host 0.0.0.0 --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
