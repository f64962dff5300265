# payments/urls.py

from django.urls import re_path

from payments.views.phonepe_callback import PhonePeCallbackView

app_name = "payments"

urlpatterns = [
    # PhonePe is configured with a fixed URL; accept it with or without the slash.
    re_path(r"^phonepe-callback/?$", PhonePeCallbackView.as_view(), name="phonepe-callback"),
]
