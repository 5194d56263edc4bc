# jobhub/db/database.py

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jobhub.config import DB_URL, SEED_DEMO_DATA
from jobhub.db.models import Base, Business, Worker
from jobhub.db.data import businesses_data, workers_data

log = logging.getLogger(__name__)

engine_kwargs = {"echo": False}  # Set echo=True for debugging SQL if needed
if DB_URL.startswith("sqlite"):
    # request threads share the connection pool
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DB_URL, **engine_kwargs)
Session = sessionmaker(bind=engine, expire_on_commit=False)


def prepare_database(seed: bool = SEED_DEMO_DATA):
    # Create tables if they don't exist. If they exist, this does nothing.
    Base.metadata.create_all(engine)
    log.info("Database tables ensured.")

    if not seed:
        return
    with Session() as session:
        if session.query(Business).count() or session.query(Worker).count():
            log.info("Demo data skipped: tables already hold rows.")
            return
        for business in businesses_data:
            session.add(Business(**business))
        for worker in workers_data:
            session.add(Worker(**worker))
        session.commit()
        log.info(f"Seeded {len(businesses_data)} businesses and {len(workers_data)} workers.")
