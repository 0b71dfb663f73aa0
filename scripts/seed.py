#!/usr/bin/env python3
"""Seed users, machines and a sample program with a setup sheet.

Usage:
  python3 scripts/seed.py                      # all users get password "millpoint"
  python3 scripts/seed.py --password secret123 --no-sample

Existing users and machines (matched by email / name) are left untouched.
"""
import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from millpoint import crud, schemas
from millpoint.config.settings import settings
from millpoint.core.numbering import KeyedLocks
from millpoint.database.connection import Database
from millpoint.models import Machine
from millpoint.services import ProgramService, SearchClient, SearchIndexer, SetupSheetService
from millpoint.utils.file_storage import FileStorage

USERS = [
    ("programmer@millpoint.com", "Hans Jensen", "programmer"),
    ("quality@millpoint.com", "Mette Nielsen", "quality"),
    ("operator@millpoint.com", "Lars Andersen", "operator"),
    ("admin@millpoint.com", "Admin User", "admin"),
]

MACHINES = [
    {"name": "DMG Mori DMU 50", "type": "Fræsemaskine", "manufacturer": "DMG Mori", "model": "DMU 50", "status": "Online", "ip_address": "192.168.1.101"},
    {"name": "Haas VF-2", "type": "Fræsemaskine", "manufacturer": "Haas", "model": "VF-2", "status": "Online", "ip_address": "192.168.1.102"},
    {"name": "Mazak Integrex i-200", "type": "Drejebænk", "manufacturer": "Mazak", "model": "Integrex i-200", "status": "Offline", "ip_address": None},
    {"name": "Okuma MU-6300V", "type": "5-akset fræser", "manufacturer": "Okuma", "model": "MU-6300V", "status": "Online", "ip_address": "192.168.1.103"},
    {"name": "Sodick AQ537L", "type": "EDM", "manufacturer": "Sodick", "model": "AQ537L", "status": "Maintenance", "ip_address": None},
]


def seed_sample(database, storage, programmer, machine):
    search_client = SearchClient(
        host=settings.MEILISEARCH_HOST,
        api_key=settings.MEILISEARCH_API_KEY,
        index_name=settings.SEARCH_INDEX_NAME,
        timeout=settings.SEARCH_TIMEOUT_SECONDS,
    ).open()
    indexer = SearchIndexer(search_client, settings.SEARCH_RETRY_ATTEMPTS, settings.SEARCH_RETRY_BACKOFF_SECONDS)
    locks = KeyedLocks()
    programs = ProgramService(database, search_client, indexer, storage, locks)
    sheets = SetupSheetService(database, storage, settings, locks)

    program = programs.create_program(schemas.ProgramCreate(
        name="Flange_Face_Mill",
        part_number="P-2024-001",
        revision="A",
        machine_id=machine.id,
        operation="Froning af flange",
        material="Aluminium 6061",
        customer="Vestas Wind Systems",
        work_order="WO-2024-156",
        description="CNC program til froning af vindmølle flange komponent",
        status=schemas.ProgramStatus.released,
    ), programmer)
    print(f"Created sample program {program.part_number}")

    sheets.create_setup_sheet(schemas.SetupSheetCreate(
        program_id=program.id,
        machine_id=machine.id,
        safety_checklist=[
            "Kontroller sikkerhedsbriller",
            "Verificer spindelhastighed",
            "Check kølevæskeniveau",
            "Inspicer værktøjer for skader",
            "Bekræft nødstop funktion",
        ],
        tools=[
            schemas.ToolIn(tool_number=1, tool_name="Face Mill Ø100mm", length=150.5, offset_h=1, offset_d=1, comment="Sandvik Coromant"),
            schemas.ToolIn(tool_number=2, tool_name="Spot Drill Ø6mm", length=75.0, offset_h=2, offset_d=2, comment="TiAlN coated"),
            schemas.ToolIn(tool_number=3, tool_name="Drill Ø8.5mm", length=120.0, offset_h=3, offset_d=3, comment="Coolant through"),
        ],
        origin_offsets=[schemas.OriginOffsetIn(name="G54", x=0.0, y=0.0, z=50.0)],
        fixtures=[schemas.FixtureIn(fixture_id="FIX-001", quantity=1, setup_description="Montér emne i maskinklemme med 4 kæber")],
        media=[schemas.MediaIn(type=schemas.MediaType.image, url="/media/setup-1.jpg", caption="Værktøjsopsætning oversigt", order=0)],
    ), programmer)
    print("Created sample setup sheet")

    programs.reindex_all()
    indexer.drain()
    search_client.close()


def main():
    parser = argparse.ArgumentParser(description='Seed development data')
    parser.add_argument('--password', default='millpoint', help='Password for newly created users')
    parser.add_argument('--no-sample', action='store_true', help='Skip the sample program and setup sheet')
    args = parser.parse_args()

    database = Database(settings.DATABASE_URL, echo=settings.ECHO_SQL).open()
    storage = FileStorage(settings.STORAGE_PATH).open()
    try:
        database.create_all()
        with database.session() as db:
            for email, name, role in USERS:
                if crud.get_user_by_email(db, email):
                    print(f"User {email} already exists")
                else:
                    crud.create_user(db, email, name, args.password, role=role)
                    print(f"Created user {email} ({name})")

            for data in MACHINES:
                if db.query(Machine).filter(Machine.name == data["name"]).first():
                    print(f"Machine {data['name']} already exists")
                else:
                    crud.create_machine(db, data)
                    print(f"Created machine {data['name']}")
            db.commit()

            programmer = crud.get_user_by_email(db, USERS[0][0])
            machine = db.query(Machine).order_by(Machine.name).first()
            has_sample = crud.query_programs(db, part_number="P-2024-001", limit=1)[1] > 0
            db.expunge_all()

        if args.no_sample or has_sample:
            print("Sample program skipped")
        else:
            seed_sample(database, storage, programmer, machine)
        print("Database seeded successfully")
    finally:
        storage.close()
        database.close()


if __name__ == '__main__':
    main()
