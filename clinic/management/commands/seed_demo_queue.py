"""
Seed demo patients and triage them so the live queue has content.
"""
from django.core.management.base import BaseCommand, CommandError

from clinic.models import Patient, User
from clinic.services.queue import has_active_entry
from clinic.services.triage import record_triage

DEMO_PATIENTS = [
    # first, last, gender, vitals
    ("Amara", "Okafor", "Female", {"bp_sys": 85, "heart_rate": 135, "temperature": 39.4, "spo2": 89}),
    ("Ben", "Hall", "Male", {"bp_sys": 120, "heart_rate": 78, "temperature": 36.8, "spo2": 98}),
    ("Chen", "Wei", "Male", {"bp_sys": 205, "heart_rate": 96, "temperature": 37.2, "spo2": 97}),
    ("Dana", "Ruiz", "Female", {"bp_sys": 118, "heart_rate": 112, "temperature": 38.3, "spo2": 94}),
    ("Eli", "Novak", "Other", {"bp_sys": 0, "heart_rate": 0, "temperature": 0, "spo2": 0}),
    ("Farah", "Khan", "Female", {"bp_sys": 132, "heart_rate": 88, "temperature": 37.0, "spo2": 99}),
]


class Command(BaseCommand):
    help = "Create demo patients and triage them into the waiting queue."

    def add_arguments(self, parser):
        parser.add_argument("--nurse", default="nurse1", help="username recorded as the triaging nurse")

    def handle(self, *args, **opts):
        nurse = User.objects.filter(username=opts["nurse"]).first()
        if not nurse:
            raise CommandError(f"nurse account {opts['nurse']!r} not found; run ensure_staff_users first")

        for first, last, gender, vitals in DEMO_PATIENTS:
            patient, _ = Patient.objects.get_or_create(
                first_name=first, last_name=last, defaults={"gender": gender},
            )
            if has_active_entry(patient):
                self.stdout.write(f"skip: {patient.full_name} already waiting")
                continue
            record, entry = record_triage(nurse, patient, {**vitals, "symptoms": "demo intake"})
            self.stdout.write(self.style.SUCCESS(
                f"queued: {patient.full_name} as {record.priority_level} (entry {entry.id})"
            ))
