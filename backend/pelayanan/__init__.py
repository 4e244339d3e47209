"""
Pelayanan Backend — Application Package Initializer
=====================================================

What: Public-service submission tracker. Citizens file service requests and
      follow them with a tracking code; administrators move submissions
      through their status lifecycle, which notifies the citizen over
      WhatsApp and email.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Workflow & Dispatchers) │  ← status guard, fan-out, auth
    ├─────────────────────────────────────┤
    │     Repositories (Persistence)      │  ← queries and conditional updates
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Connection)        │  ← engine + session factory handle
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
