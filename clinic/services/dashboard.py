from django.utils import timezone

from clinic.models import QueueEntry
from clinic.permissions import ADMIN, DOCTOR, NURSE, RECEPTIONIST
from clinic.services.priority import PriorityLevel

QUICK_ACTIONS = [
    {'key': 'register_patient', 'title': 'Register Patient', 'path': '/api/patients/create',
     'roles': {RECEPTIONIST, ADMIN}},
    {'key': 'process_triage', 'title': 'Process Triage', 'path': '/api/triage/records',
     'roles': {NURSE, ADMIN}},
    {'key': 'next_consultation', 'title': 'Next Consultation', 'path': '/api/consultations/queue',
     'roles': {DOCTOR, ADMIN}},
    {'key': 'manage_users', 'title': 'User Access', 'path': '/api/admin/users',
     'roles': {ADMIN}},
]

CRITICAL_LEVELS = (PriorityLevel.EMERGENCY.value, PriorityLevel.URGENT.value)


def start_of_day(now=None):
    now = timezone.localtime(now or timezone.now())
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def overview(user, now=None) -> dict:
    now = now or timezone.now()
    queued_today = QueueEntry.objects.filter(joined_at__gte=start_of_day(now)).count()
    waiting = QueueEntry.objects.filter(status=QueueEntry.STATUS_WAITING)
    critical = waiting.filter(priority__in=CRITICAL_LEVELS).count()

    joined = list(waiting.values_list('joined_at', flat=True))
    avg_wait = 0
    if joined:
        total_seconds = sum((now - j).total_seconds() for j in joined)
        avg_wait = int(total_seconds / len(joined) // 60)

    role = getattr(user, 'role', '')
    return {
        'role': role,
        'fullName': user.display_name(),
        'patientsQueuedToday': queued_today,
        'avgWaitMinutes': max(0, avg_wait),
        'criticalCases': critical,
        'quickActions': [
            {k: v for k, v in a.items() if k != 'roles'}
            for a in QUICK_ACTIONS if role in a['roles']
        ],
    }
