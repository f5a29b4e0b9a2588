import logging
import os
import sys

# --- Fix project path ---
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.append(BASE_DIR)

from app.db import SessionLocal, ensure_catalog_schema
from app.services.seed import seed_catalog


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    ensure_catalog_schema()
    db = SessionLocal()
    try:
        plans_created, addons_created = seed_catalog(db)
    finally:
        db.close()
    print(f"Catalog ready: {plans_created} plans and {addons_created} add-ons created, existing rows refreshed.")


if __name__ == "__main__":
    main()
