"""
Guestbook backend: name/message submissions stored in PostgreSQL.
"""
