"""
api/ - HTTP Presentation Layer
==============================
FastAPI application exposing the simulation engine, the apply/undo
transaction and the dashboard as JSON endpoints.
Like the bot handlers, routes only translate requests and delegate to services.
"""
