from contextlib import contextmanager

from sqlalchemy.orm import sessionmaker

from outlet_pos.database.engine import engine

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


@contextmanager
def session_scope(session_factory=None):
    """Yield a session; anything left uncommitted when an error escapes is rolled back."""
    db = (session_factory or SessionLocal)()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db():
    with session_scope() as db:
        yield db
