"""
Service layer.

Each service encapsulates the business logic of one domain and talks
to SQLite through ``core.db``; API handlers only translate between
HTTP and these services.
"""
