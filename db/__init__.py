"""
db/ - Database Layer
====================
PostgreSQL connection pool, the transaction() helper and schema setup.
Nothing here imports from the layers above.
"""
