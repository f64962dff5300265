# payments/views/phonepe_callback.py

"""
PHONEPE SERVER-TO-SERVER CALLBACK

POST /api/payments/phonepe-callback/
Body:    {"response": "<base64 JSON>"}
Header:  X-VERIFY: sha256(response + salt_key) + "###" + salt_index

The gateway only reads the status code, so replies are plain text:
- 200  processed, already processed, unknown order, missing transaction id
- 400  missing payload/header, checksum mismatch, undecodable payload
- 500  storage failure (invites a gateway retry)
"""

from __future__ import annotations

import logging

from django.http import HttpResponse
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.exceptions import ParseError, UnsupportedMediaType
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from orders.services.order_service import build_order_service

logger = logging.getLogger(__name__)


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


def _plain(message: str, status_code: int) -> HttpResponse:
    return HttpResponse(message, status=status_code, content_type="text/plain; charset=utf-8")


class PhonePeCallbackView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    @extend_schema(
        request={
            "application/json": {
                "type": "object",
                "properties": {"response": {"type": "string"}},
            }
        },
        parameters=[
            OpenApiParameter(
                name="X-VERIFY",
                location=OpenApiParameter.HEADER,
                required=True,
                description="Callback checksum",
            )
        ],
        responses={
            200: OpenApiResponse(description="Acknowledged"),
            400: OpenApiResponse(description="Rejected; nothing was processed"),
            500: OpenApiResponse(description="Internal error; gateway should retry"),
        },
        tags=["Payments"],
    )
    def post(self, request, *args, **kwargs):
        try:
            data = request.data
        except (ParseError, UnsupportedMediaType):
            # Unreadable body: answered like a missing payload.
            logger.warning(
                "PhonePe callback body unreadable",
                extra={"content_type": request.content_type},
            )
            data = {}
        if not isinstance(data, dict):
            data = {}
        payload_b64 = data.get("response")
        x_verify = request.headers.get("X-VERIFY")

        logger.info(
            "PhonePe callback received",
            extra={"has_payload": bool(payload_b64), "has_checksum": bool(x_verify)},
        )

        try:
            ack = build_order_service().reconcile_callback(
                payload_b64=payload_b64,
                x_verify=x_verify,
            )
        except Exception:
            logger.exception("Unhandled PhonePe callback error")
            return _plain("Internal Server Error processing callback.", 500)

        return _plain(ack.message, ack.status_code)
