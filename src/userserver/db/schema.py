"""
Table definitions.

The users table is declared with SQLAlchemy Core so one declaration serves
every dialect:

    PostgreSQL:  id SERIAL NOT NULL, name VARCHAR NOT NULL, email VARCHAR NOT NULL
    SQLite:      id INTEGER NOT NULL (rowid alias), name VARCHAR, email VARCHAR
"""

from sqlalchemy import Column, Integer, MetaData, String, Table


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("email", String, nullable=False),
)
