"""
Triage intake: record vitals, classify, enqueue.

The priority is always computed here from the submitted vitals; a
priority sent by the client is ignored.
"""
import logging
from decimal import Decimal

from django.db import transaction

from clinic.exceptions import QueueConflict
from clinic.models import Patient, QueueEntry, QueueEntryTransition, TriageRecord
from clinic.services import broadcast
from clinic.services.audit import log_action
from clinic.services.priority import VitalReading, breached_vitals, classify, sanitize_vital
from clinic.services.queue import has_active_entry
from clinic.services.text import clean_text

logger = logging.getLogger(__name__)


def reading_from_form(data) -> VitalReading:
    """Map the triage form field names onto a sanitized reading."""
    return VitalReading.from_raw(
        systolic_bp=data.get('bp_sys'),
        heart_rate=data.get('heart_rate'),
        temperature=data.get('temperature'),
        spo2=data.get('spo2'),
    )


def preview(data) -> dict:
    vitals = reading_from_form(data)
    level = classify(vitals)
    return {
        'priorityLevel': level.value,
        'breached': breached_vitals(vitals, level),
        'measured': sorted(vitals.provided()),
    }


def _as_int(value):
    value = sanitize_vital(value)
    return int(round(value)) if value is not None else None


def record_triage(nurse, patient: Patient, data) -> tuple[TriageRecord, QueueEntry]:
    """Store a triage record and put the patient in the waiting queue."""
    vitals = reading_from_form(data)
    level = classify(vitals)
    temperature = sanitize_vital(data.get('temperature'))

    with transaction.atomic():
        # Lock the patient row so two nurses cannot enqueue the same patient.
        Patient.objects.select_for_update().get(id=patient.id)
        if has_active_entry(patient):
            logger.warning("patient %s already queued; triage rejected", patient.id)
            raise QueueConflict('patient is already in the queue')
        record = TriageRecord.objects.create(
            patient=patient,
            nurse=nurse,
            bp_sys=_as_int(data.get('bp_sys')),
            diastolic_bp=_as_int(data.get('diastolic_bp')),
            heart_rate=_as_int(data.get('heart_rate')),
            temperature=Decimal(str(round(temperature, 1))) if temperature is not None else None,
            spo2=_as_int(data.get('spo2')),
            symptoms=clean_text(data.get('symptoms')),
            priority_level=level.value,
        )
        entry = QueueEntry.objects.create(
            patient=patient,
            triage=record,
            priority=record.priority_level,
            status=QueueEntry.STATUS_WAITING,
        )
        QueueEntryTransition.objects.create(
            entry=entry, from_status=None, to_status=QueueEntry.STATUS_WAITING,
            operator=nurse, reason='triage completed',
        )
        log_action(user=nurse, action='triage_record', object_type='triage', object_id=record.id,
                   detail={'patientId': patient.id, 'priority': level.value})
        transaction.on_commit(lambda: broadcast.queue_changed('enqueued', entry.id))

    logger.info("patient %s triaged as %s (entry %s)", patient.id, level.value, entry.id)
    return record, entry
