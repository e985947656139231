"""
Patient registration and lookup.

Receptionists register and edit patients; nurses and doctors read
records and history.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import PatientRecordsAccess
from clinic.serializers.patient import (
    PatientCreateSerializer,
    PatientListQuerySerializer,
    PatientUpdateSerializer,
)
from clinic.services import patients as svc


@api_view(['GET'])
@permission_classes([IsAuthenticated, PatientRecordsAccess])
def list_patients(request):
    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items, total = svc.search_patients(
        (vd.get('q') or '').strip() or None,
        page=vd.get('page') or 1,
        page_size=vd.get('pageSize') or 0,
    )
    return Response({'items': [svc.format_patient(p) for p in items], 'total': total})


@api_view(['POST'])
@permission_classes([IsAuthenticated, PatientRecordsAccess])
def create_patient(request):
    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = svc.create_patient(request.user, **s.validated_data)
    return Response({'ok': True, 'patient': svc.format_patient(patient)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, PatientRecordsAccess])
def update_patient(request):
    s = PatientUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    patient = svc.get_patient_or_404(data.pop('id'))
    patient = svc.update_patient(request.user, patient, **data)
    return Response({'ok': True, 'patient': svc.format_patient(patient)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, PatientRecordsAccess])
def patient_detail(request, pk: int):
    return Response(svc.format_patient(svc.get_patient_or_404(pk)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, PatientRecordsAccess])
def patient_history(request, pk: int):
    patient = svc.get_patient_or_404(pk)
    return Response({'patient': svc.format_patient(patient), **svc.patient_history(patient)})
