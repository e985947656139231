"""
Live waiting queue.

Entries come back in triage order (Emergency, Urgent, Normal, then
arrival).  Only waiting entries may be cancelled.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import QueueEntry
from clinic.permissions import IsClinicalStaff, IsReceptionist
from clinic.serializers.consult import QueueCancelSerializer
from clinic.services import queue as svc


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def queue_list(request):
    entries = svc.waiting_entries()
    return Response({'items': svc.format_queue(entries), 'total': len(entries)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsClinicalStaff])
def queue_stats(request):
    return Response(svc.queue_stats())


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsReceptionist])
def queue_cancel(request):
    s = QueueCancelSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = QueueEntry.objects.select_related('patient').filter(id=s.validated_data['entryId']).first()
    if not entry:
        raise NotFound('queue entry not found')
    entry = svc.cancel_entry(entry, request.user, s.validated_data.get('reason') or '')
    return Response({'ok': True, 'id': entry.id, 'status': entry.status})
