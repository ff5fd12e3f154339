"""
services/ - Business Logic Layer
================================
Billing-cycle normalization, simulations, apply/undo and reporting.
Services read and write through repositories and raise utils.errors types.
"""
