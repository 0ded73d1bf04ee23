# services/academy-service/src/apps/core/api/views/internal_views.py
"""
Internal Views

Endpoints for other services. Authenticated with the shared service token.
"""

import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.views import APIView

from shared.common.authentication import ServiceAuthentication
from shared.common.permissions import IsServiceRequest

from ...events.handlers import dispatch_event, EVENT_HANDLERS
from ..serializers import InternalEventSerializer
from .base import success_response

logger = logging.getLogger(__name__)


class InternalEventView(APIView):
    """
    Receive an event relayed by another service (payment webhooks,
    registration, payout notifications) and dispatch it to its handler.
    """

    authentication_classes = [ServiceAuthentication]
    permission_classes = [IsServiceRequest]

    @extend_schema(request=InternalEventSerializer, responses={202: None})
    def post(self, request):
        serializer = InternalEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        event_type = serializer.validated_data['event_type']
        handled = dispatch_event(event_type, serializer.validated_data['data'])

        logger.info(
            f"Dispatched event {event_type}",
            extra={'source_service': getattr(request.user, 'service_name', None), 'handled': handled}
        )

        return success_response(
            event_type=event_type,
            known=event_type in EVENT_HANDLERS,
            handled=handled,
            status=status.HTTP_202_ACCEPTED
        )
