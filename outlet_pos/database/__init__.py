from outlet_pos.database.base import Base
from outlet_pos.database.engine import engine, init_db
from outlet_pos.database.session import SessionLocal, session_scope

__all__ = ["Base", "engine", "init_db", "SessionLocal", "session_scope"]
