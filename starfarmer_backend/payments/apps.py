# payments/apps.py

"""
PAYMENTS APP CONFIG

PhonePe integration:
- Checksum codec + merchant transaction ids
- Gateway client (pay API)
- Server-to-server callback endpoint

The gateway configuration is read from settings ONCE, here, and handed to the
gateway client / order service as an explicit object.
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments (PhonePe)"

    phonepe_config = None

    def ready(self):
        from payments.config import PhonePeConfig

        self.phonepe_config = PhonePeConfig.from_settings()
