"""Clinic front-desk application.

Models, serializers, services and views for patient registration,
triage, the live waiting queue, consultations and staff administration.
"""
