"""
utils/ - Cross-cutting helpers
==============================
Logging, the error taxonomy and input validation.
"""
