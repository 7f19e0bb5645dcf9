"""
auth — account creation, login and identity check.

Provides:
  • Password hashing (bcrypt, work factor 10)
  • JWT issuance & verification (PyJWT)
  • Session cache of ``{id, email}`` projections (Redis or in-process, TTL)
  • ``/v1/user`` API routes and the ``get_current_user`` FastAPI dependency
"""
