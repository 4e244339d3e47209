# Middleware package init
"""
Pelayanan Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation id for every log line of the request
    2. Logging: method, path, status and duration, tagged with the request id
    3. CORS: CORSMiddleware subclass; preflights on the status endpoint go to its route
"""
