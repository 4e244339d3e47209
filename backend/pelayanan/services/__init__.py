# Services package init
"""
Pelayanan Backend — Services Layer
====================================

Service Inventory:
    - status_service:        status transition guard + notification fan-out
    - NotificationDispatcher (abstract): one notification channel
    - WhatsAppDispatcher:    HTTP messaging gateway
    - EmailDispatcher:       SMTP
    - NotificationDispatchers: channels notified on each status change
    - submission_service:    filing and tracking submissions
    - auth_service:          admin login, password hashing, JWT
"""
