"""
Django admin registrations for the clinic models.

Queue entries are read-mostly here: status changes should go through
the API so that transitions are validated and recorded.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
    Consultation,
    Patient,
    Prescription,
    QueueEntry,
    QueueEntryTransition,
    TriageRecord,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'full_name', 'role', 'is_active', 'created_at')
    list_filter = ('role', 'is_active')
    search_fields = ('username', 'email', 'full_name')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'first_name', 'last_name', 'dob', 'gender', 'phone', 'created_at')
    search_fields = ('first_name', 'last_name', 'phone')


@admin.register(TriageRecord)
class TriageRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'priority_level', 'bp_sys', 'heart_rate', 'temperature', 'spo2', 'created_at')
    list_filter = ('priority_level',)
    search_fields = ('patient__first_name', 'patient__last_name')


class QueueEntryTransitionInline(admin.TabularInline):
    model = QueueEntryTransition
    extra = 0
    readonly_fields = ('from_status', 'to_status', 'operator', 'timestamp', 'reason')


@admin.register(QueueEntry)
class QueueEntryAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'priority', 'status', 'joined_at')
    list_filter = ('status', 'priority')
    readonly_fields = ('priority', 'status', 'triage')
    inlines = [QueueEntryTransitionInline]


class PrescriptionInline(admin.TabularInline):
    model = Prescription
    extra = 0


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ('id', 'doctor', 'patient', 'created_at')
    search_fields = ('patient__first_name', 'patient__last_name', 'doctor__username')
    inlines = [PrescriptionInline]


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'user', 'action', 'object_type', 'object_id')
    list_filter = ('action', 'object_type')
    readonly_fields = ('user', 'action', 'object_type', 'object_id', 'detail', 'created_at')
