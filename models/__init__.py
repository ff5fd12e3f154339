"""
models/ - Domain Layer
======================
Plain dataclasses for subscriptions, categories and the ephemeral
simulation/dashboard records. No I/O lives here.
"""
