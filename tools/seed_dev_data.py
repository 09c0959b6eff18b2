#!/usr/bin/env python3
"""
Seed a development patient with a few weeks of tracking data.

Writes go through the same service layer the API uses, so the seeded data
exercises the get-or-create daily entry path.

Requirements:
    - SUPABASE_URL environment variable
    - SUPABASE_SERVICE_KEY environment variable

Usage:
    export SUPABASE_URL="https://your-project.supabase.co"
    export SUPABASE_SERVICE_KEY="your-service-role-key"
    python tools/seed_dev_data.py [--patient-id UUID] [--days 14] [--yes]
"""
import argparse
import asyncio
import os
import random
import sys
from datetime import date, timedelta

from supabase import acreate_client, AsyncClient
from supabase.lib.client_options import AsyncClientOptions

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from services.anchors import get_or_create_cycle_log, get_or_create_daily_entry, update_daily_entry  # noqa: E402
from services.context import PatientContext  # noqa: E402
from services.records import add_record, upsert_record  # noqa: E402

DEV_PATIENT_ID = "11111111-1111-1111-1111-111111111111"

MEALS = ["breakfast", "lunch", "dinner", "snack"]
EXERCISES = [("Walk", 30), ("Yoga", 45), ("Swim", 40), ("Stretching", None)]


async def get_supabase_client() -> AsyncClient:
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_SERVICE_KEY")

    if not url or not key:
        print("ERROR: Missing required environment variables", file=sys.stderr)
        print("Please set SUPABASE_URL and SUPABASE_SERVICE_KEY", file=sys.stderr)
        sys.exit(1)

    return await acreate_client(url, key, options=AsyncClientOptions(persist_session=False))


def confirm_action(message: str) -> bool:
    while True:
        response = input(f"{message} (yes/no): ").strip().lower()
        if response in ['yes', 'y']:
            return True
        elif response in ['no', 'n']:
            return False
        else:
            print("Please answer 'yes' or 'no'")


async def ensure_patient(supabase: AsyncClient, patient_id: str) -> None:
    """Create the profile, patient profile and config rows if missing."""
    await supabase.table("profiles").upsert(
        {"id": patient_id, "role": "patient", "full_name": "Dev Patient"}, on_conflict="id"
    ).execute()
    await supabase.table("patient_profiles").upsert({"id": patient_id}, on_conflict="id").execute()
    await supabase.table("patient_configs").upsert(
        {"patient_id": patient_id, "tracking_window_days": 30, "edit_window_days": 7},
        on_conflict="patient_id",
    ).execute()


async def seed_regimen(supabase: AsyncClient, patient_id: str, start: date):
    """One formulation for the whole range, one treatment stopping midway."""
    formulation = await supabase.table("regimen_formulations").insert({
        "patient_id": patient_id,
        "name": "Triphala",
        "when_label": "Before bed",
        "dose": "1 tsp",
        "with_text": "warm water",
        "start_date": start.isoformat(),
    }).execute()
    treatment = await supabase.table("regimen_treatments").insert({
        "patient_id": patient_id,
        "name": "Oil massage",
        "when_label": "Morning",
        "body_region": "Full body",
        "start_date": start.isoformat(),
        "stop_date": (start + timedelta(days=7)).isoformat(),
    }).execute()
    return formulation.data[0], treatment.data[0]


async def seed_day(supabase: AsyncClient, ctx: PatientContext, day: date, formulation, treatment, cycle_day: int):
    entry = await get_or_create_daily_entry(supabase, ctx, day)
    await update_daily_entry(supabase, ctx, entry["id"], {
        "energy_physical": random.randint(3, 9),
        "energy_mental": random.randint(3, 9),
        "energy_emotional": random.randint(3, 9),
        "energy_drive": random.randint(3, 9),
        "overall_mood": random.randint(3, 9),
        "cycle_day": cycle_day,
    })

    for meal in random.sample(MEALS, k=random.randint(2, 4)):
        await add_record(supabase, ctx, "food_event", entry["id"], {"meal_type": meal})

    name, minutes = random.choice(EXERCISES)
    exercise = {"exercise_type": name}
    if minutes is not None:
        exercise["duration_minutes"] = minutes
    await add_record(supabase, ctx, "exercise_event", entry["id"], exercise)

    if random.random() < 0.85:
        await upsert_record(supabase, ctx, "formulation_intake", entry["id"], {
            "regimen_formulation_id": formulation["id"],
            "status": random.choice(["taken", "taken", "partial"]),
        })
    if random.random() < 0.7:
        await upsert_record(supabase, ctx, "treatment_completion", entry["id"], {
            "regimen_treatment_id": treatment["id"],
            "status": "completed",
        })

    if cycle_day <= 5:
        log = await get_or_create_cycle_log(supabase, ctx, entry["id"])
        await upsert_record(supabase, ctx, "cycle_log", entry["id"], {
            "id": log["id"],
            "cycle_day": cycle_day,
            "bleeding_quantity": "medium" if cycle_day <= 3 else "light",
            "blood_color": "red",
            "physical_symptom_keys": ["cramps"] if cycle_day <= 2 else [],
            "emotional_symptom_keys": [],
            "clots": False,
            "mucus": False,
        })


async def seed(patient_id: str, days: int) -> None:
    supabase = await get_supabase_client()
    ctx = PatientContext(patient_id=patient_id)
    today = date.today()
    start = today - timedelta(days=days - 1)

    await ensure_patient(supabase, patient_id)
    formulation, treatment = await seed_regimen(supabase, patient_id, start)

    for offset in range(days):
        day = start + timedelta(days=offset)
        await seed_day(supabase, ctx, day, formulation, treatment, cycle_day=(offset % 28) + 1)
        print(f"  seeded {day.isoformat()}")

    print(f"\nDone: {days} days for patient {patient_id}")


def main():
    parser = argparse.ArgumentParser(description="Seed a development patient.")
    parser.add_argument("--patient-id", default=DEV_PATIENT_ID)
    parser.add_argument("--days", type=int, default=14)
    parser.add_argument("--yes", action="store_true", help="Skip confirmation")
    args = parser.parse_args()

    if args.days < 1:
        print("ERROR: --days must be at least 1", file=sys.stderr)
        sys.exit(1)

    print(f"\nPreparing to seed {args.days} days for patient: {args.patient_id}")
    if not args.yes and not confirm_action("Proceed?"):
        print("Aborted.")
        return

    asyncio.run(seed(args.patient_id, args.days))


if __name__ == "__main__":
    main()
