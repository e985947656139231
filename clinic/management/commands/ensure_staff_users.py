from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password

from clinic.models import User

STAFF_SET = [
    ("admin1", "admin", "Clinic Administrator"),
    ("reception1", "receptionist", "Front Desk"),
    ("nurse1", "nurse", "Triage Nurse"),
    ("doctor1", "doctor", "Duty Doctor"),
]


class Command(BaseCommand):
    help = "Ensure one demo account per role exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="ChangeMe-123", help="password for every demo account")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for username, role, full_name in STAFF_SET:
            u, created = User.objects.get_or_create(
                username=username,
                defaults={
                    "role": role,
                    "full_name": full_name,
                    "email": f"{username}@clinic.local",
                    "password": password,
                    "is_active": True,
                },
            )
            if not created:
                # reset password, role and active flag on existing accounts
                u.password = password
                u.role = role
                u.is_active = True
                u.save(update_fields=["password", "role", "is_active"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All staff accounts ensured."))
