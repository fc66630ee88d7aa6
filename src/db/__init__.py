"""
Database Module
-------------
Handles database connections, ORM models, and the resource store.
Uses SQLAlchemy; accounts, campgrounds, comments and likes each live in their own table.
"""
