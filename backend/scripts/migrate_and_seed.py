import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

DATABASE_URL = os.environ.get("DATABASE_URL", "")
if not DATABASE_URL:
    print("WARNING: DATABASE_URL not set, skipping migration and seed")
    sys.exit(0)

from labour_engine.database import SessionLocal, engine, init_db
from labour_engine.services.db_rates import seed_default_rates

print("Creating tables...")
init_db(engine)
print("Tables created.")

session = SessionLocal()
try:
    added = seed_default_rates(session)
    if added:
        print(f"All done. Seeded {added} rate rows.")
    else:
        print("Database already contains award rates, skipping seed.")
except Exception as e:
    session.rollback()
    print(f"Seed error: {e}")
    raise
finally:
    session.close()
