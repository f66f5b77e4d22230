"""
Persistence package for the Follow Service.

Stores follow edges in PostgreSQL. The primary key is oriented on the
follower; a secondary index on the followee serves follower lookups.
"""

from .postgres import PostgresRelationshipStore

__all__ = ["PostgresRelationshipStore"]
