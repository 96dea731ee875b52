"""
Seed the configured namespace with a small SUDS demo dataset.

Usage:
  python scripts/seed_demo_data.py

Idempotent: categories, activities, the asset and the contract are only added
when missing (matched by name).
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables first
from dotenv import load_dotenv
load_dotenv()

from suds_hub.config import settings
from suds_hub.db import Base, engine
from suds_hub.models import models  # noqa: F401
from suds_hub.models.domain import CONTRACTS, SUDS_TYPES
from suds_hub.services import activity_records, assets, contracts, taxonomy
from suds_hub.store.factory import get_store


DEMO_TAXONOMY = {
    "Limpieza": ["Barrido", "Poda", "Retirada de sedimentos"],
    "Vegetación": ["Riego", "Siega"],
    "Inspección": ["Revisión visual"],
}

DEMO_ASSETS = [
    {
        "name": "Zanja de infiltración",
        "description": "Zanja rellena de grava que recoge la escorrentía y la infiltra en el terreno.",
        "locationTypes": ["acera", "zona_verde"],
    },
    {
        "name": "Jardín de lluvia",
        "description": "Depresión ajardinada que retiene y filtra el agua de lluvia.",
        "locationTypes": ["zona_verde"],
    },
]

DEMO_CONTRACT = {"name": "Conservación 2024", "responsible": "Ayuntamiento de Madrid", "summary": "Conservación de SUDS"}


def seed(store) -> None:
    current = taxonomy.get_taxonomy(store)
    for category, names in DEMO_TAXONOMY.items():
        if category not in current["categories"]:
            taxonomy.add_category(store, category)
            print(f"  [+] category {category}")
        existing = current["activities"].get(category, [])
        for name in names:
            if name not in existing:
                taxonomy.add_activity_name(store, category, name)
                print(f"  [+] activity {category} / {name}")

    by_name = {a["name"]: a for a in store.query(SUDS_TYPES)}
    for data in DEMO_ASSETS:
        if data["name"] not in by_name:
            by_name[data["name"]] = assets.add_asset(store, data, actor_id="seed")
            print(f"  [+] asset {data['name']}")

    if not store.query(CONTRACTS, lambda d: d.get("name") == DEMO_CONTRACT["name"]):
        contracts.add_contract(store, DEMO_CONTRACT, actor_id="seed")
        print(f"  [+] contract {DEMO_CONTRACT['name']}")

    zanja = by_name["Zanja de infiltración"]
    record = activity_records.set_applies(store, zanja["id"], "Limpieza", "Barrido", True, actor_id="seed")
    if not record.get("involvedContracts"):
        activity_records.update_field(store, record["id"], "status", "verde", actor_id="seed")
        activity_records.update_field(store, record["id"], "involvedContracts", [DEMO_CONTRACT["name"]], actor_id="seed")
        print("  [+] Zanja de infiltración -> Limpieza -> Barrido")


def main():
    print(f"Seeding namespace '{settings.namespace}' ({settings.store_provider})")
    if settings.store_provider == "sql":
        if settings.database_url.startswith("sqlite:///./"):
            os.makedirs("var", exist_ok=True)
        Base.metadata.create_all(bind=engine)
    seed(get_store())
    print("[OK] Demo data ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
