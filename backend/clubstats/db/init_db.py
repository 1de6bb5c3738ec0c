from clubstats.db.session import engine
from clubstats.db.base import Base

# registers the models on Base.metadata before creating tables
import clubstats.models  # noqa: F401


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
