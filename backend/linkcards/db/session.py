from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from linkcards.core.config import settings

# SQLite connections are shared across FastAPI worker threads.
connect_args = {'check_same_thread': False} if settings.database_url.startswith('sqlite') else {}

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)
