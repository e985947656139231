"""
Database models for the clinic front desk.

These models capture staff accounts, registered patients, triage
assessments, the live waiting queue and the consultations (with
prescriptions) that doctors record once they attend a patient.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models

from .services.priority import PriorityLevel


class User(AbstractUser):
    """Staff account with a single role.

    ``is_active`` doubles as the suspension flag managed from the user
    administration screen; suspended accounts cannot authenticate.
    """
    ROLE_ADMIN = 'admin'
    ROLE_RECEPTIONIST = 'receptionist'
    ROLE_NURSE = 'nurse'
    ROLE_DOCTOR = 'doctor'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Administrator'),
        (ROLE_RECEPTIONIST, 'Receptionist'),
        (ROLE_NURSE, 'Nurse'),
        (ROLE_DOCTOR, 'Doctor'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_RECEPTIONIST, db_index=True)
    full_name = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def display_name(self) -> str:
        return self.full_name or self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    """A registered patient.  Patients do not log in."""
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    dob = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    medical_history = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['last_name', 'first_name'], name='patient_name_idx')]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name


class TriageRecord(models.Model):
    """Vitals captured by a nurse and the priority derived from them.

    Vitals that were not measured are stored as NULL.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='triage_records')
    nurse = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='triage_records')
    bp_sys = models.PositiveIntegerField(null=True, blank=True)
    diastolic_bp = models.PositiveIntegerField(null=True, blank=True)
    heart_rate = models.PositiveIntegerField(null=True, blank=True)
    temperature = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    spo2 = models.PositiveIntegerField(null=True, blank=True)
    symptoms = models.TextField(blank=True)
    priority_level = models.CharField(max_length=16, choices=PriorityLevel.choices(), db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'created_at'], name='triage_patient_created_idx')]

    def __str__(self) -> str:
        return f"Triage {self.id} {self.patient} {self.priority_level}"


class QueueEntry(models.Model):
    """A patient's position in the live waiting queue.

    ``priority`` is copied from the triage record when the entry is
    created and is not re-derived afterwards.
    """
    STATUS_WAITING = 'waiting'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (STATUS_WAITING, 'Waiting'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]
    ACTIVE_STATUSES = (STATUS_WAITING,)

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='queue_entries')
    triage = models.OneToOneField(TriageRecord, on_delete=models.CASCADE, related_name='queue_entry')
    priority = models.CharField(max_length=16, choices=PriorityLevel.choices(), db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_WAITING, db_index=True)
    joined_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'queue entries'
        indexes = [models.Index(fields=['status', 'joined_at'], name='queue_status_joined_idx')]

    @property
    def arrival_time(self):
        return self.joined_at

    def save(self, *args, **kwargs):
        try:
            PriorityLevel(self.priority)
        except ValueError:
            raise ValidationError({'priority': f'unknown priority level: {self.priority!r}'})
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Queue {self.id} {self.patient} ({self.priority}, {self.status})"


class QueueEntryTransition(models.Model):
    """Records a status transition for a queue entry."""
    entry = models.ForeignKey(QueueEntry, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=20, null=True, blank=True)
    to_status = models.CharField(max_length=20)
    operator = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_transitions')
    timestamp = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.entry_id}: {self.from_status} → {self.to_status}"


class Consultation(models.Model):
    doctor = models.ForeignKey(User, null=True, on_delete=models.SET_NULL, related_name='consultations')
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='consultations')
    queue_entry = models.OneToOneField(
        QueueEntry, null=True, blank=True, on_delete=models.SET_NULL, related_name='consultation'
    )
    diagnosis = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['doctor', 'created_at'], name='consult_doctor_created_idx'),
            models.Index(fields=['patient', 'created_at'], name='consult_patient_created_idx'),
        ]

    def __str__(self):
        return f"consult {self.id} d={self.doctor_id} p={self.patient_id}"


class Prescription(models.Model):
    consultation = models.ForeignKey(Consultation, on_delete=models.CASCADE, related_name='prescriptions')
    medication_name = models.CharField(max_length=255)
    dosage = models.CharField(max_length=100)
    frequency = models.CharField(max_length=100)
    duration = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.medication_name} {self.dosage} ({self.consultation_id})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
        ]
