"""
Doctor consultation endpoints.

A doctor attends the next patient from the live queue, then records a
diagnosis and prescriptions on their own consultation.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import QueueEntry
from clinic.permissions import IsDoctor
from clinic.serializers.consult import (
    AttendSerializer,
    ConsultFinishSerializer,
    ConsultListQuerySerializer,
    PrescriptionSerializer,
)
from clinic.services import consultations as svc
from clinic.services import queue as queue_svc
from clinic.services.patients import format_prescription


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def consultation_queue(request):
    entries = queue_svc.waiting_entries()
    return Response({'items': queue_svc.format_queue(entries, with_vitals=True), 'total': len(entries)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def consultation_attend(request):
    s = AttendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = QueueEntry.objects.filter(id=s.validated_data['entryId']).first()
    if not entry:
        raise NotFound('queue entry not found')
    consult = svc.attend(request.user, entry)
    return Response({'ok': True, 'consultation': svc.format_consultation(consult)},
                    status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def consultation_list(request):
    q = ConsultListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    items, total = svc.list_for_doctor(
        request.user,
        page=q.validated_data.get('page') or 1,
        page_size=q.validated_data.get('pageSize') or 20,
    )
    return Response({'items': items, 'total': total})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def consultation_finish(request):
    s = ConsultFinishSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    consult = svc.get_own_consultation(request.user, s.validated_data['consultationId'])
    consult = svc.finish(request.user, consult,
                         diagnosis=s.validated_data['diagnosis'], notes=s.validated_data.get('notes', ''))
    return Response({'ok': True, 'consultation': svc.format_consultation(consult)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def consultation_prescribe(request):
    s = PrescriptionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    consult = svc.get_own_consultation(request.user, vd['consultationId'])
    rx = svc.add_prescription(
        request.user, consult,
        medication_name=vd['medication_name'],
        dosage=vd['dosage'],
        frequency=vd['frequency'],
        duration=vd['duration'],
    )
    return Response({'ok': True, 'prescription': format_prescription(rx)}, status=status.HTTP_201_CREATED)
