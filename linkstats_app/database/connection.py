from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from linkstats_app.config import settings

# SQLite needs check_same_thread=False because FastAPI serves requests from a threadpool
connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(settings.database_url, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
