# database.py
from databases import Database
from sqlalchemy import create_engine, MetaData

from task_service.config import DATABASE_URL

# async database client
database = Database(DATABASE_URL)

# SQLAlchemy sync engine for metadata.create_all()
SYNC_DATABASE_URL = DATABASE_URL.replace("+asyncpg", "").replace("+aiosqlite", "")
connect_args = {"check_same_thread": False} if SYNC_DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(SYNC_DATABASE_URL, connect_args=connect_args)
metadata = MetaData()
