"""
Operational scripts, run as modules from the backend directory:

    python -m pelayanan.scripts.create_admin --username admin --email admin@example.go.id
    python -m pelayanan.scripts.reset_database --yes
"""
