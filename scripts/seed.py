# scripts/seed.py

import os
import sys
import argparse
from datetime import date, timedelta

from dotenv import load_dotenv
from sqlmodel import Session, select

# Ensure root path for relative imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.clock import get_clock
from core.database import create_db_and_tables, engine
from models.models import Organization, Student, StudentStatus
from services.billing_cycle import clamp_to_month, shift_month

# ✅ Load environment variables
load_dotenv()


def _month_day(today: date, months_back: int, day: int) -> date:
    year, month = shift_month(today.year, today.month, -months_back)
    return clamp_to_month(year, month, day)


def demo_students(today: date):
    """One student per payment state, anchored around today's date."""
    soon = today + timedelta(days=2)
    later = today + timedelta(days=12)
    return [
        # Paid this month -> current
        dict(full_name="Ana Torres", instrument="Guitarra", monthly_fee=1200.0,
             enrollment_date=_month_day(today, 6, later.day),
             last_payment_date=today.replace(day=1)),
        # Paid last month, cutoff in two days -> upcoming
        dict(full_name="Luis Medina", instrument="Batería", monthly_fee=1350.0,
             enrollment_date=_month_day(today, 4, soon.day),
             last_payment_date=_month_day(today, 1, soon.day)),
        # Skipped last month -> overdue
        dict(full_name="Sofía Rivera", instrument="Canto", monthly_fee=1100.0,
             enrollment_date=_month_day(today, 8, 10),
             last_payment_date=_month_day(today, 2, 10)),
        # Never paid -> overdue
        dict(full_name="Diego Ramírez", instrument="Bajo", monthly_fee=1200.0,
             enrollment_date=_month_day(today, 1, 31),
             last_payment_date=None),
        # Withdrawn -> inactive
        dict(full_name="Carla Núñez", instrument="Teclado", monthly_fee=1250.0,
             enrollment_date=_month_day(today, 10, 5),
             last_payment_date=_month_day(today, 5, 5),
             status=StudentStatus.WITHDRAWN.value),
        # No enrollment date on file -> unknown
        dict(full_name="Mario Salas", instrument="Guitarra", monthly_fee=1200.0,
             enrollment_date=None, last_payment_date=None),
    ]


def seed_dev_data():
    """Seed development database with a demo school and its roster."""
    print("🌱 Seeding development data...")
    create_db_and_tables()
    today = get_clock().today()

    with Session(engine) as session:
        # -----------------------------
        # 🏢 Create Demo Organization
        # -----------------------------
        org = session.exec(
            select(Organization).where(Organization.name == "Demo Music School")
        ).first()

        if not org:
            org = Organization(name="Demo Music School", slug="demo-music")
            session.add(org)
            session.commit()
            session.refresh(org)
            print("✅ Created Demo Music School")

        # -----------------------------
        # 🎸 Students
        # -----------------------------
        for data in demo_students(today):
            existing = session.exec(
                select(Student).where(
                    Student.organization_id == org.id,
                    Student.full_name == data["full_name"],
                )
            ).first()
            if not existing:
                session.add(Student(organization_id=org.id, **data))

        session.commit()
        print("✅ Added demo students")
        print("🌱 Development data seeding complete.")


def seed_staging_data():
    """Seed staging database with minimal safe data."""
    print("🌱 Seeding staging data...")
    create_db_and_tables()

    with Session(engine) as session:
        org = session.exec(
            select(Organization).where(Organization.name == "Staging School")
        ).first()

        if not org:
            org = Organization(name="Staging School", slug="staging")
            session.add(org)
            session.commit()
            print("✅ Created Staging School")

        print("🌱 Staging data seeding complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the billing database.")
    parser.add_argument(
        "--env",
        choices=["dev", "staging"],
        default="dev",
        help="Select environment to seed (dev or staging)",
    )
    args = parser.parse_args()

    if args.env == "dev":
        seed_dev_data()
    elif args.env == "staging":
        seed_staging_data()
