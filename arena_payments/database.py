from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from arena_payments.config import settings

connect_args = {"check_same_thread": False} if settings.db_url.startswith("sqlite") else {}
engine = create_engine(settings.db_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    from arena_payments.models import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
