"""
DB-API connections and connection pooling for the driver adapters.

psycopg, pymysql and trino are installed via pip; a DataSource (product_type, host, ...) is enough.
"""

from .connect import as_datasource, connect, cursor_columns, cursor_to_dicts, execute
from .manager import ConnectionPool
from .models import DataSource, ProductTypeEnum

__all__ = [
    "DataSource",
    "ProductTypeEnum",
    "as_datasource",
    "connect",
    "execute",
    "cursor_columns",
    "cursor_to_dicts",
    "ConnectionPool",
]
