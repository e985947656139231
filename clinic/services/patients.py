import logging
from typing import Optional

from django.db.models import Q, Value
from django.db.models.functions import Concat
from rest_framework.exceptions import NotFound

from clinic.models import Patient, TriageRecord, Consultation
from clinic.services.audit import log_action

logger = logging.getLogger(__name__)

PATIENT_FIELDS = ('first_name', 'last_name', 'dob', 'gender', 'phone', 'medical_history')


def get_patient_or_404(patient_id) -> Patient:
    patient = Patient.objects.filter(id=patient_id).first()
    if not patient:
        raise NotFound('patient not found')
    return patient


def search_patients(q: Optional[str]=None, *, page: int=1, page_size: int=0):
    qs = Patient.objects.all()
    if q:
        qs = qs.annotate(
            _full=Concat('first_name', Value(' '), 'last_name'),
        ).filter(Q(_full__icontains=q) | Q(phone__icontains=q))
    qs = qs.order_by('-created_at', '-id')
    total = qs.count()
    if page_size:
        start = (max(1, page) - 1) * page_size
        qs = qs[start:start + page_size]
    return list(qs), total


def create_patient(current_user, **data) -> Patient:
    patient = Patient.objects.create(**{k: data.get(k) for k in PATIENT_FIELDS if data.get(k) is not None})
    log_action(user=current_user, action='patient_create', object_type='patient', object_id=patient.id)
    logger.info("patient %s registered by %s", patient.id, getattr(current_user, 'username', None))
    return patient


def update_patient(current_user, patient: Patient, **data) -> Patient:
    changed = []
    for field in PATIENT_FIELDS:
        if field in data:
            setattr(patient, field, data[field])
            changed.append(field)
    if changed:
        patient.save(update_fields=changed + ['updated_at'])
        log_action(user=current_user, action='patient_update', object_type='patient', object_id=patient.id,
                   detail={'fields': changed})
    return patient


def format_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'firstName': p.first_name,
        'lastName': p.last_name,
        'name': p.full_name,
        'dob': p.dob.isoformat() if p.dob else None,
        'gender': p.gender,
        'phone': p.phone,
        'medicalHistory': p.medical_history,
        'createdAt': p.created_at.isoformat(),
    }


def format_prescription(rx) -> dict:
    return {
        'id': rx.id,
        'medicationName': rx.medication_name,
        'dosage': rx.dosage,
        'frequency': rx.frequency,
        'duration': rx.duration,
        'createdAt': rx.created_at.isoformat(),
    }


def format_vitals(t: TriageRecord) -> dict:
    return {
        'id': t.id,
        'bpSys': t.bp_sys,
        'diastolicBp': t.diastolic_bp,
        'heartRate': t.heart_rate,
        'temperature': float(t.temperature) if t.temperature is not None else None,
        'spo2': t.spo2,
        'symptoms': t.symptoms,
        'priorityLevel': t.priority_level,
        'createdAt': t.created_at.isoformat(),
    }


def patient_history(patient: Patient) -> dict:
    """Past consultations (with prescriptions) and triage vitals, newest first."""
    consultations = (
        Consultation.objects.filter(patient=patient)
        .select_related('doctor')
        .prefetch_related('prescriptions')
        .order_by('-created_at', '-id')
    )
    vitals = TriageRecord.objects.filter(patient=patient).order_by('-created_at', '-id')
    return {
        'consultations': [
            {
                'id': c.id,
                'diagnosis': c.diagnosis,
                'notes': c.notes,
                'doctorName': c.doctor.display_name() if c.doctor else None,
                'createdAt': c.created_at.isoformat(),
                'prescriptions': [format_prescription(rx) for rx in c.prescriptions.all()],
            }
            for c in consultations
        ],
        'vitals': [format_vitals(t) for t in vitals],
    }
