from .async_db import create_async_db_and_tables, dispose_engine, get_async_db

__all__ = ["create_async_db_and_tables", "dispose_engine", "get_async_db"]
