"""
Models package: exposes the process-wide DBStorage.

The storage only owns the engine and a thread-scoped session registry; each
request gets its own session and create_app() decides where it connects.
"""
from models.db_storage import DBStorage

storage = DBStorage()
