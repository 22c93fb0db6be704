import pytest
from sqlalchemy.pool import StaticPool

from tichi_survey import database


@pytest.fixture
def sqlite_store():
    engine = database.init_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    database.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    database.engine = None
    database._schema_ready = False
