"""
repositories/ - Subscription Store
==================================
SQL access for subscriptions, categories and users.
Services only see Subscription and Category objects; psycopg2 errors
propagate and are translated into StoreError by the service layer.
"""
