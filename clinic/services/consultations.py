import logging

from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.models import Consultation, Prescription, QueueEntry
from clinic.services.audit import log_action
from clinic.services.patients import format_prescription
from clinic.services.queue import transition
from clinic.services.text import clean_text as _clean

logger = logging.getLogger(__name__)


def get_own_consultation(doctor, consultation_id) -> Consultation:
    """Doctors only reach their own consultations; admins reach all."""
    consult = Consultation.objects.select_related('patient').filter(id=consultation_id).first()
    if not consult:
        raise NotFound('consultation not found')
    if getattr(doctor, 'role', '') != 'admin' and consult.doctor_id != doctor.id:
        raise PermissionDenied('not your consultation')
    return consult


def attend(doctor, entry: QueueEntry) -> Consultation:
    """Take a waiting patient out of the live queue and open a consultation."""
    with transaction.atomic():
        entry = transition(entry, QueueEntry.STATUS_COMPLETED, operator=doctor, reason='attended by doctor')
        consult = Consultation.objects.create(
            doctor=doctor,
            patient_id=entry.patient_id,
            queue_entry=entry,
            diagnosis='',
            notes='',
        )
        log_action(user=doctor, action='consult_attend', object_type='consultation', object_id=consult.id,
                   detail={'queueEntryId': entry.id, 'patientId': entry.patient_id})
    logger.info("doctor %s attended queue entry %s (consultation %s)", doctor.username, entry.id, consult.id)
    return consult


def finish(doctor, consult: Consultation, *, diagnosis: str, notes: str) -> Consultation:
    consult.diagnosis = _clean(diagnosis)
    consult.notes = _clean(notes)
    consult.save(update_fields=['diagnosis', 'notes', 'updated_at'])
    log_action(user=doctor, action='consult_finish', object_type='consultation', object_id=consult.id)
    return consult


def add_prescription(doctor, consult: Consultation, *, medication_name: str, dosage: str,
                     frequency: str, duration: str) -> Prescription:
    rx = Prescription.objects.create(
        consultation=consult,
        medication_name=_clean(medication_name),
        dosage=_clean(dosage),
        frequency=_clean(frequency),
        duration=_clean(duration),
    )
    log_action(user=doctor, action='prescription_add', object_type='consultation', object_id=consult.id,
               detail={'prescriptionId': rx.id, 'medication': rx.medication_name})
    logger.info("prescription %s added to consultation %s", rx.id, consult.id)
    return rx


def list_for_doctor(doctor, *, page: int=1, page_size: int=20):
    qs = Consultation.objects.all()
    if getattr(doctor, 'role', '') != 'admin':
        qs = qs.filter(doctor=doctor)
    total = qs.count()
    page = max(1, int(page or 1))
    page_size = min(100, max(1, int(page_size or 20)))
    start = (page - 1) * page_size
    items = (
        qs.select_related('patient')
        .prefetch_related('prescriptions')
        .order_by('-created_at', '-id')[start:start + page_size]
    )
    return [format_consultation(c) for c in items], total


def format_consultation(c: Consultation) -> dict:
    p = c.patient
    return {
        'id': c.id,
        'doctorId': c.doctor_id,
        'diagnosis': c.diagnosis,
        'notes': c.notes,
        'createdAt': c.created_at.isoformat(),
        'patient': {
            'id': p.id,
            'name': p.full_name,
            'gender': p.gender,
            'dob': p.dob.isoformat() if p.dob else None,
        },
        'prescriptions': [format_prescription(rx) for rx in c.prescriptions.all()],
    }
