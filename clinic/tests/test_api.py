"""
Integration tests for the clinic front desk API.

These exercise the main desk workflow (register, triage, queue, attend,
prescribe) together with role based access control and staff
administration, using DRF's APIClient inside APITestCase.

To run the tests:

```
pytest -q clinic/tests
```
"""
from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import AuditEvent, Consultation, Patient, QueueEntry, QueueEntryTransition, TriageRecord, User
from ..services.triage import record_triage


class ClinicAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username="admin1", password="Adm1n-pass!", role="admin")
        self.receptionist = User.objects.create_user(username="reception1", password="R3cept-pass!",
                                                     role="receptionist")
        self.nurse = User.objects.create_user(username="nurse1", password="Nurs3-pass!", role="nurse")
        self.doctor = User.objects.create_user(username="doctor1", password="D0ctor-pass!", role="doctor",
                                               full_name="Dr. Ada Grey")
        self.other_doctor = User.objects.create_user(username="doctor2", password="D0ctor-pass!", role="doctor")

        self.alice = Patient.objects.create(first_name="Alice", last_name="Moss", gender="Female")
        self.bob = Patient.objects.create(first_name="Bob", last_name="Stone", gender="Male")
        self.cara = Patient.objects.create(first_name="Cara", last_name="Lind", gender="Female", phone="555-0100")

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def enqueue(self, patient, minutes_ago, **vitals):
        _, entry = record_triage(self.nurse, patient, vitals)
        QueueEntry.objects.filter(id=entry.id).update(joined_at=timezone.now() - timedelta(minutes=minutes_ago))
        entry.refresh_from_db()
        return entry

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------
    def test_receptionist_registers_patient(self):
        client = self.authenticate(self.receptionist)
        response = client.post(reverse("patient-create"), {
            "first_name": "Dan",
            "last_name": "<b>Ray</b>",
            "dob": "1990-04-02",
            "gender": "Male",
            "phone": "555-0199",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        patient = Patient.objects.get(id=response.data["patient"]["id"])
        self.assertEqual(patient.last_name, "Ray")
        self.assertTrue(AuditEvent.objects.filter(action="patient_create", object_id=patient.id).exists())

    def test_nurse_cannot_register_patient(self):
        client = self.authenticate(self.nurse)
        response = client.post(reverse("patient-create"), {"first_name": "X", "last_name": "Y"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["ok"])

    def test_patient_search_and_update(self):
        client = self.authenticate(self.receptionist)
        response = client.get(reverse("patient-list"), {"q": "alice m"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["id"] for p in response.data["items"]], [self.alice.id])

        response = client.get(reverse("patient-list"), {"q": "555-0100"})
        self.assertEqual([p["id"] for p in response.data["items"]], [self.cara.id])

        response = client.post(reverse("patient-update"), {"id": self.bob.id, "phone": "555-0123"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.bob.refresh_from_db()
        self.assertEqual(self.bob.phone, "555-0123")
        self.assertEqual(self.bob.first_name, "Bob")

    def test_doctor_reads_patient_history(self):
        entry = self.enqueue(self.alice, 5, bp_sys=120, heart_rate=80, spo2=98)
        self.authenticate(self.doctor).post(reverse("consultation-attend"), {"entryId": entry.id}, format="json")

        response = self.authenticate(self.doctor).get(reverse("patient-history", args=[self.alice.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["consultations"]), 1)
        self.assertEqual(len(response.data["vitals"]), 1)
        self.assertEqual(response.data["vitals"][0]["priorityLevel"], "Normal")

    def test_unknown_patient_is_404(self):
        response = self.authenticate(self.nurse).get(reverse("patient-detail", args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    # ------------------------------------------------------------------
    # Triage
    # ------------------------------------------------------------------
    def test_triage_classifies_server_side_and_enqueues(self):
        client = self.authenticate(self.nurse)
        response = client.post(reverse("triage-records"), {
            "patient_id": self.alice.id,
            "bp_sys": 85,
            "heart_rate": 80,
            "temperature": "37.0",
            "spo2": 98,
            "symptoms": "dizzy",
            "priority_level": "Normal",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["priorityLevel"], "Emergency")

        entry = QueueEntry.objects.get(patient=self.alice)
        self.assertEqual(entry.status, QueueEntry.STATUS_WAITING)
        self.assertEqual(entry.priority, "Emergency")
        self.assertEqual(entry.triage.priority_level, "Emergency")
        self.assertTrue(QueueEntryTransition.objects.filter(entry=entry, to_status="waiting").exists())

    def test_blank_vitals_are_normal(self):
        client = self.authenticate(self.nurse)
        response = client.post(reverse("triage-records"), {
            "patient_id": self.bob.id, "bp_sys": 0, "heart_rate": None, "spo2": 0,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["priorityLevel"], "Normal")
        record = TriageRecord.objects.get(patient=self.bob)
        self.assertIsNone(record.bp_sys)
        self.assertIsNone(record.heart_rate)

    def test_blank_and_negative_form_values_mean_not_measured(self):
        client = self.authenticate(self.nurse)
        response = client.post(reverse("triage-records"), {
            "patient_id": self.alice.id, "bp_sys": "", "spo2": -1, "heart_rate": 80, "temperature": "abc",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["priorityLevel"], "Normal")
        record = TriageRecord.objects.get(patient=self.alice)
        self.assertIsNone(record.bp_sys)
        self.assertIsNone(record.spo2)
        self.assertIsNone(record.temperature)
        self.assertEqual(record.heart_rate, 80)

    def test_out_of_range_vital_is_rejected(self):
        client = self.authenticate(self.nurse)
        response = client.post(reverse("triage-records"), {"patient_id": self.alice.id, "spo2": 140},
                               format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(QueueEntry.objects.exists())

    def test_symptoms_are_stored_as_plain_text(self):
        client = self.authenticate(self.nurse)
        response = client.post(reverse("triage-records"), {
            "patient_id": self.alice.id, "symptoms": "BP < 90 & <b>dizzy</b>",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(TriageRecord.objects.get(patient=self.alice).symptoms, "BP < 90 & dizzy")

    def test_patient_cannot_be_queued_twice(self):
        client = self.authenticate(self.nurse)
        payload = {"patient_id": self.alice.id, "spo2": 93}
        self.assertEqual(client.post(reverse("triage-records"), payload, format="json").status_code, 201)
        response = client.post(reverse("triage-records"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "queue_conflict")
        self.assertEqual(QueueEntry.objects.filter(patient=self.alice).count(), 1)

    def test_classify_preview_does_not_persist(self):
        client = self.authenticate(self.nurse)
        response = client.post(reverse("triage-classify"), {"heart_rate": 115, "spo2": 97}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["priorityLevel"], "Urgent")
        self.assertEqual(response.data["breached"], ["heart_rate"])
        self.assertFalse(TriageRecord.objects.exists())

    def test_receptionist_cannot_triage(self):
        client = self.authenticate(self.receptionist)
        response = client.post(reverse("triage-records"), {"patient_id": self.alice.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------
    def test_queue_is_ordered_by_priority_then_arrival(self):
        normal = self.enqueue(self.alice, 30, bp_sys=120, spo2=98)
        late_emergency = self.enqueue(self.bob, 1, spo2=88)
        urgent = self.enqueue(self.cara, 10, heart_rate=112)

        response = self.authenticate(self.receptionist).get(reverse("queue-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [item["id"] for item in response.data["items"]]
        self.assertEqual(ids, [late_emergency.id, urgent.id, normal.id])
        self.assertEqual([item["position"] for item in response.data["items"]], [1, 2, 3])
        self.assertGreaterEqual(response.data["items"][2]["waitMinutes"], 29)

        nurse_view = self.authenticate(self.nurse).get(reverse("triage-records"))
        self.assertEqual(nurse_view.data["counts"], {"Emergency": 1, "Urgent": 1, "Normal": 1})
        self.assertIn("triage", nurse_view.data["queue"][0])

    def test_queue_stats_and_cancel(self):
        entry = self.enqueue(self.alice, 3, spo2=94)
        self.enqueue(self.bob, 2, spo2=99)

        client = self.authenticate(self.receptionist)
        response = client.post(reverse("queue-cancel"), {"entryId": entry.id, "reason": "left"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "cancelled")

        stats = client.get(reverse("queue-stats")).data
        self.assertEqual(stats["byStatus"]["cancelled"], 1)
        self.assertEqual(stats["waitingCount"], 1)
        self.assertEqual(stats["waitingByPriority"]["Normal"], 1)

        again = client.post(reverse("queue-cancel"), {"entryId": entry.id}, format="json")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)

    def test_doctor_cannot_cancel(self):
        entry = self.enqueue(self.alice, 3, spo2=94)
        response = self.authenticate(self.doctor).post(reverse("queue-cancel"), {"entryId": entry.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_priority_cannot_be_saved(self):
        from django.core.exceptions import ValidationError
        entry = self.enqueue(self.alice, 1, spo2=99)
        entry.priority = "Critical"
        with self.assertRaises(ValidationError):
            entry.save()

    # ------------------------------------------------------------------
    # Consultations
    # ------------------------------------------------------------------
    def test_attend_finish_and_prescribe(self):
        entry = self.enqueue(self.alice, 8, temperature=39.5)
        client = self.authenticate(self.doctor)

        queue = client.get(reverse("consultation-queue")).data
        self.assertEqual(queue["items"][0]["id"], entry.id)
        self.assertEqual(queue["items"][0]["triage"]["temperature"], 39.5)

        response = client.post(reverse("consultation-attend"), {"entryId": entry.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        consult_id = response.data["consultation"]["id"]
        entry.refresh_from_db()
        self.assertEqual(entry.status, QueueEntry.STATUS_COMPLETED)
        self.assertEqual(client.get(reverse("queue-list")).data["total"], 0)

        second = self.authenticate(self.other_doctor).post(reverse("consultation-attend"),
                                                           {"entryId": entry.id}, format="json")
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)

        response = client.post(reverse("consultation-finish"), {
            "consultationId": consult_id, "diagnosis": "Influenza", "notes": "rest and fluids",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Consultation.objects.get(id=consult_id).diagnosis, "Influenza")

        response = client.post(reverse("consultation-prescribe"), {
            "consultationId": consult_id,
            "medication_name": "Paracetamol",
            "dosage": "500mg",
            "frequency": "every 6 hours",
            "duration": "5 days",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        mine = client.get(reverse("consultation-list")).data
        self.assertEqual(mine["total"], 1)
        self.assertEqual(mine["items"][0]["prescriptions"][0]["medicationName"], "Paracetamol")

    def test_prescription_requires_every_field(self):
        entry = self.enqueue(self.alice, 1, spo2=97)
        client = self.authenticate(self.doctor)
        consult_id = client.post(reverse("consultation-attend"), {"entryId": entry.id},
                                 format="json").data["consultation"]["id"]
        response = client.post(reverse("consultation-prescribe"), {
            "consultationId": consult_id, "medication_name": "Ibuprofen", "frequency": "daily", "duration": "3 days",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_doctor_only_touches_own_consultations(self):
        entry = self.enqueue(self.alice, 1, spo2=97)
        consult_id = self.authenticate(self.doctor).post(
            reverse("consultation-attend"), {"entryId": entry.id}, format="json",
        ).data["consultation"]["id"]

        other = self.authenticate(self.other_doctor)
        response = other.post(reverse("consultation-finish"),
                              {"consultationId": consult_id, "diagnosis": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(other.get(reverse("consultation-list")).data["total"], 0)

    def test_nurse_cannot_attend(self):
        entry = self.enqueue(self.alice, 1, spo2=97)
        response = self.authenticate(self.nurse).post(reverse("consultation-attend"),
                                                      {"entryId": entry.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    def test_dashboard_overview(self):
        self.enqueue(self.alice, 20, spo2=88)
        self.enqueue(self.bob, 10, heart_rate=112)
        self.enqueue(self.cara, 0, spo2=99)

        response = self.authenticate(self.nurse).get(reverse("dashboard"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["criticalCases"], 2)
        self.assertEqual(response.data["role"], "nurse")
        self.assertIn(response.data["avgWaitMinutes"], (9, 10))
        self.assertEqual([a["key"] for a in response.data["quickActions"]], ["process_triage"])

        admin_actions = self.authenticate(self.admin).get(reverse("dashboard")).data["quickActions"]
        self.assertEqual(len(admin_actions), 4)

    # ------------------------------------------------------------------
    # Staff administration
    # ------------------------------------------------------------------
    def test_admin_creates_and_manages_staff(self):
        client = self.authenticate(self.admin)
        response = client.post(reverse("admin-user-create"), {
            "email": "New.Nurse@Clinic.test",
            "password": "Tr1age-Desk-2024",
            "full_name": "New Nurse",
            "role": "nurse",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user_id = response.data["user"]["id"]
        created = User.objects.get(id=user_id)
        self.assertEqual(created.username, "new.nurse@clinic.test")
        self.assertTrue(created.check_password("Tr1age-Desk-2024"))

        duplicate = client.post(reverse("admin-user-create"), {
            "email": "new.nurse@clinic.test", "password": "Tr1age-Desk-2024", "full_name": "Dup", "role": "nurse",
        }, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

        response = client.post(reverse("admin-user-toggle"), {"userId": user_id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["user"]["isActive"])

        response = client.post(reverse("admin-user-terminate"), {"userId": user_id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(id=user_id).exists())
        self.assertTrue(AuditEvent.objects.filter(action="user_terminate", object_id=user_id).exists())

    def test_weak_password_rejected(self):
        response = self.authenticate(self.admin).post(reverse("admin-user-create"), {
            "email": "d@clinic.test", "password": "123", "full_name": "Weak", "role": "doctor",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_suspend_or_terminate_self(self):
        client = self.authenticate(self.admin)
        for name in ("admin-user-toggle", "admin-user-terminate"):
            response = client.post(reverse(name), {"userId": self.admin.id}, format="json")
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.is_active)

    def test_non_admin_cannot_list_users(self):
        for user in (self.receptionist, self.nurse, self.doctor):
            response = self.authenticate(user).get(reverse("admin-user-list"))
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.authenticate(self.admin).get(reverse("admin-user-list"))
        self.assertEqual(len(response.data), 5)

    def test_unauthenticated_requests_are_rejected(self):
        response = APIClient().get(reverse("queue-list"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
