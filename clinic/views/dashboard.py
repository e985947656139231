"""
Role-aware dashboard overview.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.services.dashboard import overview


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Today's intake, current average wait, critical waiting count and quick actions."""
    return Response(overview(request.user))
