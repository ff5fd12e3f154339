"""
handlers/ - Telegram Presentation Layer
=======================================
Bot commands for listing, simulating, cancelling and undoing.
Subscriptions are addressed by their number in /subscriptions; handlers
turn those numbers into IDs, call a service and format the reply.
"""
