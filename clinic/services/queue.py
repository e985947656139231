"""
Live waiting queue.

Waiting entries are always returned in the order produced by
:func:`clinic.services.sequencing.sequence`, never in raw database
order.  Status changes go through :func:`transition` so that every
change is validated and recorded.
"""
import logging
from typing import Optional

from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from clinic.exceptions import QueueConflict
from clinic.models import QueueEntry, QueueEntryTransition
from clinic.services import broadcast
from clinic.services.priority import PriorityLevel
from clinic.services.sequencing import sequence

logger = logging.getLogger(__name__)

TRANSITIONS = {
    QueueEntry.STATUS_WAITING: [QueueEntry.STATUS_COMPLETED, QueueEntry.STATUS_CANCELLED],
    QueueEntry.STATUS_COMPLETED: [],
    QueueEntry.STATUS_CANCELLED: [],
}


def can_transition(current: str, new: str) -> bool:
    """Return True if a queue entry may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, [])


def transition(entry: QueueEntry, new_status: str, *, operator=None, reason: str='') -> QueueEntry:
    """Move ``entry`` to ``new_status`` under a row lock and record it."""
    with transaction.atomic():
        locked = QueueEntry.objects.select_for_update().get(id=entry.id)
        if not can_transition(locked.status, new_status):
            logger.warning("rejected queue transition %s: %s -> %s", locked.id, locked.status, new_status)
            raise QueueConflict(f'cannot move entry from {locked.status} to {new_status}')
        old_status = locked.status
        locked.status = new_status
        locked.save(update_fields=['status', 'updated_at'])
        QueueEntryTransition.objects.create(
            entry=locked,
            from_status=old_status,
            to_status=new_status,
            operator=operator,
            reason=reason,
        )
        transaction.on_commit(lambda: broadcast.queue_changed(new_status, locked.id))
    entry.status = locked.status
    return locked


def has_active_entry(patient) -> bool:
    return QueueEntry.objects.filter(patient=patient, status__in=QueueEntry.ACTIVE_STATUSES).exists()


def waiting_entries() -> list[QueueEntry]:
    """All waiting entries, next to be seen first."""
    qs = QueueEntry.objects.filter(status=QueueEntry.STATUS_WAITING).select_related('patient', 'triage')
    return sequence(qs.order_by('joined_at', 'id'))


def wait_minutes(entry: QueueEntry, now=None) -> int:
    now = now or timezone.now()
    return max(0, int((now - entry.joined_at).total_seconds() // 60))


def format_entry(entry: QueueEntry, position: Optional[int]=None, *, with_vitals: bool=False, now=None) -> dict:
    data = {
        'id': entry.id,
        'position': position,
        'patientId': entry.patient_id,
        'patientName': entry.patient.full_name,
        'priority': entry.priority,
        'status': entry.status,
        'joinedAt': entry.joined_at.isoformat(),
        'waitMinutes': wait_minutes(entry, now),
    }
    if with_vitals:
        t = entry.triage
        data['triage'] = {
            'id': t.id,
            'bpSys': t.bp_sys,
            'diastolicBp': t.diastolic_bp,
            'heartRate': t.heart_rate,
            'temperature': float(t.temperature) if t.temperature is not None else None,
            'spo2': t.spo2,
            'symptoms': t.symptoms,
        }
    return data


def format_queue(entries, *, with_vitals: bool=False) -> list[dict]:
    now = timezone.now()
    return [format_entry(e, i, with_vitals=with_vitals, now=now) for i, e in enumerate(entries, start=1)]


def priority_counts(entries) -> dict:
    counts = {level.value: 0 for level in PriorityLevel}
    for e in entries:
        counts[PriorityLevel(e.priority).value] += 1
    return counts


def queue_stats() -> dict:
    by_status = {s: 0 for s, _ in QueueEntry.STATUS_CHOICES}
    for row in QueueEntry.objects.values('status').annotate(n=Count('id')):
        by_status[row['status']] = row['n']
    waiting = QueueEntry.objects.filter(status=QueueEntry.STATUS_WAITING)
    return {
        'byStatus': by_status,
        'waitingByPriority': priority_counts(waiting.only('priority')),
        'waitingCount': by_status[QueueEntry.STATUS_WAITING],
    }


def cancel_entry(entry: QueueEntry, operator, reason: str='') -> QueueEntry:
    entry = transition(entry, QueueEntry.STATUS_CANCELLED, operator=operator, reason=reason or 'cancelled at desk')
    logger.info("queue entry %s cancelled by %s", entry.id, getattr(operator, 'username', None))
    return entry
