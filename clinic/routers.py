"""
URL mappings for the clinic API.

Every API path lives under ``api/`` without a trailing slash.
"""
from django.urls import include, path

from .auth_views import forgot_password_view, jwt_refresh_view, login_view, logout_view, me_view
from .views import admin_users, consultations, health, patients, queues, triage
from .views.dashboard import dashboard


urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/login', login_view, name='auth-login'),
    path('api/auth/refresh', jwt_refresh_view, name='auth-refresh'),
    path('api/auth/logout', logout_view, name='auth-logout'),
    path('api/auth/me', me_view, name='auth-me'),
    path('api/auth/forgot-password', forgot_password_view, name='auth-forgot-password'),
    # Dashboard
    path('api/dashboard', dashboard, name='dashboard'),
    # Patients
    path('api/patients', patients.list_patients, name='patient-list'),
    path('api/patients/create', patients.create_patient, name='patient-create'),
    path('api/patients/update', patients.update_patient, name='patient-update'),
    path('api/patients/<int:pk>', patients.patient_detail, name='patient-detail'),
    path('api/patients/<int:pk>/history', patients.patient_history, name='patient-history'),
    # Triage
    path('api/triage/classify', triage.classify_vitals, name='triage-classify'),
    path('api/triage/records', triage.triage_records, name='triage-records'),
    # Live queue
    path('api/queue', queues.queue_list, name='queue-list'),
    path('api/queue/stats', queues.queue_stats, name='queue-stats'),
    path('api/queue/cancel', queues.queue_cancel, name='queue-cancel'),
    # Consultations
    path('api/consultations', consultations.consultation_list, name='consultation-list'),
    path('api/consultations/queue', consultations.consultation_queue, name='consultation-queue'),
    path('api/consultations/attend', consultations.consultation_attend, name='consultation-attend'),
    path('api/consultations/finish', consultations.consultation_finish, name='consultation-finish'),
    path('api/consultations/prescriptions', consultations.consultation_prescribe,
         name='consultation-prescribe'),
    # Staff administration
    path('api/admin/users', admin_users.user_list, name='admin-user-list'),
    path('api/admin/users/create', admin_users.user_create, name='admin-user-create'),
    path('api/admin/users/toggle', admin_users.user_toggle, name='admin-user-toggle'),
    path('api/admin/users/terminate', admin_users.user_terminate, name='admin-user-terminate'),
]
