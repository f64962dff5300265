# notifications/apps.py

"""
NOTIFICATIONS APP CONFIG

Best-effort order emails:
- customer order confirmation
- admin new-order notification

Sent off the request path with retries; failures are logged, never raised.
"""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "Notifications"
