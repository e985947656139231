"""
Nurse triage desk.

``classify`` previews the priority for a set of vitals without saving;
``records`` saves vitals and enqueues the patient.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsNurse
from clinic.serializers.triage import TriageRecordSerializer, VitalsSerializer
from clinic.services import queue as queue_svc
from clinic.services import triage as svc
from clinic.services.patients import format_vitals, get_patient_or_404


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def classify_vitals(request):
    s = VitalsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    return Response(svc.preview(s.validated_data))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsNurse])
def triage_records(request):
    if request.method == 'GET':
        entries = queue_svc.waiting_entries()
        return Response({
            'queue': queue_svc.format_queue(entries, with_vitals=True),
            'counts': queue_svc.priority_counts(entries),
        })

    s = TriageRecordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = get_patient_or_404(s.validated_data['patient_id'])
    record, entry = svc.record_triage(request.user, patient, s.validated_data)
    return Response({
        'ok': True,
        'priorityLevel': record.priority_level,
        'triage': format_vitals(record),
        'queueEntry': queue_svc.format_entry(entry),
    }, status=status.HTTP_201_CREATED)

triage_records.cls.throttle_scope = 'triage_write'
