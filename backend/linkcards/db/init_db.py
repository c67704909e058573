from pathlib import Path

from sqlalchemy.engine import URL, Engine

from linkcards.core.logging import get_logger
from linkcards.db.base import Base
from linkcards.db.session import engine as default_engine

logger = get_logger('db.init')


def ensure_sqlite_parent_dir(url: URL) -> None:
    if not url.drivername.startswith('sqlite') or url.database in (None, '', ':memory:'):
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def init_db(engine: Engine | None = None) -> None:
    engine = engine or default_engine
    ensure_sqlite_parent_dir(engine.url)
    Base.metadata.create_all(bind=engine)
    logger.info('Cache tables ready on %s', engine.url.render_as_string(hide_password=True))
