# Routes package init
"""
Pelayanan Backend — API Routes Package
========================================

Route Inventory:
    - submissions.py: POST   /api/submissions                (file a request)
                      PATCH  /api/submissions/{id}           (change status)
                      OPTIONS /api/submissions/{id}          (CORS preflight)
                      GET|POST|PUT|DELETE /api/submissions/{id} → 405
                      GET    /api/track/{tracking_code}      (public lookup)
    - admin.py:       POST   /api/admin/login
    - health.py:      GET    /health

Routes are THIN: extract request data, call a service, shape the response.
"""
