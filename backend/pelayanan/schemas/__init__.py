# Schemas package init
"""
Pydantic request/response models — the API contract.

Schemas are separate from the SQLAlchemy models so the API controls exactly
which fields leave the server (NIK, email and WhatsApp number are never part
of a public response).
"""
