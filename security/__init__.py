"""
security/ - Access control
==========================
Whitelist and rate limiting shared by the bot and the HTTP API.
"""
