"""
Integration tests for the hospital operations API.

These tests exercise the behaviours the dashboards rely on: the response
envelope, role based access, surgery scheduling conflicts, the token
queue and the public display endpoints.  They use Django REST
Framework's APIClient within the APITestCase base class.

To run the tests:

```
pytest -q clinic/tests
```
"""
from datetime import datetime, timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Department, Display, Drug, Patient, SurgeryBooking, Theater, User


def _iso(dt):
    return timezone.localtime(dt).isoformat()


class HospitalAPITests(APITestCase):
    def setUp(self) -> None:
        self.department = Department.objects.create(name="Cardiology", capacity=20, current_occupancy=5)
        self.admin_user = User.objects.create_user(username="admin1", password="P@ssw0rd1", role="admin")
        self.doctor = User.objects.create_user(
            username="doc1", password="P@ssw0rd1", role="doctor", first_name="Ravi", last_name="Kumar",
            department=self.department,
        )
        self.nurse = User.objects.create_user(username="nurse1", password="P@ssw0rd1", role="nurse")
        self.pharmacist = User.objects.create_user(username="pharm1", password="P@ssw0rd1", role="pharmacist")
        self.patient_user = User.objects.create_user(username="patient1", password="P@ssw0rd1", role="patient")
        self.patient = Patient.objects.create(name="John Doe", age=40, gender="Male", condition="Appendicitis")

        day = timezone.localdate() + timedelta(days=1)
        self.tomorrow_9 = timezone.make_aware(datetime(day.year, day.month, day.day, 9))

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def _schedule(self, client, start, duration="2 hours", **extra):
        payload = {
            "patientId": self.patient.id,
            "procedure": "Appendectomy",
            "theaterId": "OT-001",
            "scheduledTime": _iso(start),
            "estimatedDuration": duration,
        }
        payload.update(extra)
        return client.post(reverse("schedule_surgery"), payload, format="json")

    # -- envelope and auth -------------------------------------------------

    def test_anonymous_request_is_rejected_with_envelope(self):
        response = APIClient().get(reverse("theaters"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])
        self.assertIn("error", response.data)

    def test_not_found_uses_envelope(self):
        client = self.authenticate(self.nurse)
        response = client.patch(reverse("theater_detail", args=["OT-999"]), {"name": "x"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {"success": False, "error": "Theater not found"})

    def test_validation_errors_are_flattened(self):
        client = self.authenticate(self.doctor)
        response = client.post(reverse("schedule_surgery"), {"procedure": "Appendectomy"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertIn("patientId", response.data["error"])

    def test_patients_are_not_staff(self):
        client = self.authenticate(self.patient_user)
        self.assertEqual(client.get(reverse("patients")).status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(client.get(reverse("theaters")).status_code, status.HTTP_403_FORBIDDEN)

    # -- theaters and surgeries --------------------------------------------

    def test_theater_list_seeds_defaults(self):
        client = self.authenticate(self.pharmacist)
        response = client.get(reverse("theaters"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        by_id = {t["id"]: t for t in response.data["data"]}
        self.assertEqual(sorted(by_id), ["OT-001", "OT-002", "OT-003", "OT-004"])
        self.assertEqual(by_id["OT-003"]["status"], "maintenance")
        self.assertEqual(by_id["OT-001"]["status"], "available")
        self.assertEqual(by_id["OT-001"]["name"], "Operating Theater 001")

    def test_read_only_roles_cannot_add_theaters(self):
        client = self.authenticate(self.pharmacist)
        response = client.post(reverse("theaters"), {"id": "OT-010"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.authenticate(self.nurse).post(reverse("theaters"), {"id": "OT-010"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["status"], "Available")

    def test_check_conflict(self):
        now = timezone.now()
        Theater.objects.create(
            id="OT-002", status="In Progress", patient_name="John Doe", procedure="Appendectomy",
            start_time=now - timedelta(hours=1), estimated_end=now + timedelta(hours=1),
        )
        client = self.authenticate(self.nurse)
        url = reverse("theater_check_conflict")
        inside = {"theaterId": "OT-002", "scheduledTime": _iso(now + timedelta(minutes=30)), "estimatedDuration": "1 hours"}
        after = {"theaterId": "OT-002", "scheduledTime": _iso(now + timedelta(minutes=90)), "estimatedDuration": "1 hours"}
        self.assertTrue(client.post(url, inside, format="json").data["data"]["hasConflict"])
        self.assertFalse(client.post(url, after, format="json").data["data"]["hasConflict"])

    def test_schedule_and_conflict(self):
        client = self.authenticate(self.doctor)
        response = self._schedule(client, self.tomorrow_9, surgeonId=self.doctor.id, priority="High")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertEqual(data["theaterId"], "OT-001")
        self.assertEqual(data["surgeon"], "Ravi Kumar")
        self.assertEqual(data["priority"], "high")

        response = self._schedule(client, self.tomorrow_9 + timedelta(hours=1), duration="1 hours")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])
        self.assertEqual(SurgeryBooking.objects.count(), 1)

    def test_nurse_cannot_schedule(self):
        response = self._schedule(self.authenticate(self.nurse), self.tomorrow_9)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_cancel_surgery_twice(self):
        client = self.authenticate(self.doctor)
        booking_id = self._schedule(client, self.tomorrow_9).data["data"]["id"]
        url = reverse("surgery_cancel", args=[booking_id])
        self.assertEqual(client.post(url).status_code, status.HTTP_200_OK)
        second = client.post(url)
        self.assertEqual(second.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Cancelled", second.data["error"])

    def test_ot_board_payload(self):
        client = self.authenticate(self.doctor)
        self._schedule(client, self.tomorrow_9)
        response = client.get(reverse("ot_board"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        board = response.data["data"]
        self.assertEqual(set(board), {"theaters", "todaySchedule", "emergencyQueue"})
        ot1 = next(t for t in board["theaters"] if t["id"] == "OT-001")
        self.assertEqual(ot1["status"], "booked")
        self.assertEqual(ot1["nextSurgery"]["patient"], "John Doe")

    # -- alerts --------------------------------------------------------------

    def test_emergency_case_and_queue(self):
        client = self.authenticate(self.nurse)
        response = client.post(
            reverse("emergency_case"),
            {"patientName": "Asha Rao", "condition": "Chest pain", "priority": "critical"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["priority"], 1)

        queue = client.get(reverse("emergency_queue")).data["data"]
        self.assertEqual(queue[0]["priority"], "critical")
        self.assertEqual(queue[0]["condition"], "Chest pain - Patient: Asha Rao")

    # -- tokens ----------------------------------------------------------------

    def test_token_flow_and_invalid_transition(self):
        client = self.authenticate(self.nurse)
        response = client.post(
            reverse("tokens"), {"patientId": self.patient.id, "departmentId": self.department.id}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        token_id = response.data["data"]["id"]

        url = reverse("token_update_status", args=[token_id])
        bad = client.post(url, {"status": "Completed"}, format="json")
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(bad.data["error"], "Cannot move token from Waiting to Completed")

        self.assertEqual(client.post(url, {"status": "Called"}, format="json").status_code, status.HTTP_200_OK)
        detail = client.get(reverse("token_detail", args=[token_id])).data["data"]
        self.assertEqual([h["to"] for h in detail["transitionHistory"]], ["Waiting", "Called"])
        self.assertEqual(detail["transitionHistory"][1]["operator"], "nurse1")

    def test_public_board_hides_patient_names(self):
        client = self.authenticate(self.nurse)
        client.post(reverse("tokens"), {"patientId": self.patient.id, "departmentId": self.department.id}, format="json")
        response = APIClient().get(reverse("department_token_board", args=[self.department.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        nxt = response.data["data"]["nextToken"]
        self.assertEqual(nxt["displayName"], "J*** D***")
        self.assertNotIn("patientName", nxt)
        self.assertNotIn("patientId", nxt)

    def test_check_conflict_with_huge_duration(self):
        client = self.authenticate(self.nurse)
        payload = {"theaterId": "OT-002", "scheduledTime": _iso(self.tomorrow_9),
                   "estimatedDuration": "99999999999999 hours"}
        response = client.post(reverse("theater_check_conflict"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        payload["scheduledTime"] = "9999-12-31T23:00:00+05:30"
        payload["estimatedDuration"] = "3 hours"
        response = client.post(reverse("theater_check_conflict"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

    # -- displays --------------------------------------------------------------

    def test_display_heartbeat_and_data_are_public(self):
        display = Display.objects.create(location="Lobby", content="Token Queue")
        anon = APIClient()
        response = anon.post(reverse("display_heartbeat"), {"displayId": display.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        display.refresh_from_db()
        self.assertEqual(display.status, "online")
        self.assertIsNotNone(display.last_update)

        response = anon.get(reverse("display_data", args=[display.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["tokens"], [])

        missing = anon.post(reverse("display_heartbeat"), {"displayId": 9999}, format="json")
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_department_queue_display_needs_department(self):
        client = self.authenticate(self.admin_user)
        response = client.post(
            reverse("displays"), {"location": "Cardio wing", "content": "Department Token Queue"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("departmentId", response.data["error"])

    def test_department_id_must_be_an_integer(self):
        client = self.authenticate(self.admin_user)
        response = client.post(
            reverse("displays"),
            {"location": "Cardio wing", "content": "Department Token Queue", "config": {"departmentId": "abc"}},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("departmentId must be a positive integer", response.data["error"])

        response = client.post(
            reverse("displays"),
            {"location": "Cardio wing", "content": "Department Token Queue",
             "config": {"departmentId": str(self.department.id)}},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["config"], {"departmentId": self.department.id})

    def test_partial_update_uses_stored_config(self):
        display = Display.objects.create(location="Lobby", content="Token Queue",
                                         config={"departmentId": self.department.id})
        client = self.authenticate(self.admin_user)
        url = reverse("display_detail", args=[display.id])
        response = client.patch(url, {"content": "Department Token Queue"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["content"], "Department Token Queue")

        bare = Display.objects.create(location="Atrium", content="Token Queue")
        response = client.patch(reverse("display_detail", args=[bare.id]),
                                {"content": "Department Token Queue"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bad_stored_department_id_does_not_break_display(self):
        display = Display.objects.create(location="Ward", content="Department Token Queue",
                                         config={"departmentId": "abc"})
        response = APIClient().get(reverse("display_data", args=[display.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["data"]["board"])

    # -- pharmacy ---------------------------------------------------------------

    def test_prescription_written_then_dispensed(self):
        Drug.objects.create(name="Paracetamol 500mg", current_stock=50, min_stock=10)
        payload = {
            "patientId": self.patient.id,
            "notes": "<b>after food</b>",
            "medications": [
                {"drugName": "Paracetamol 500mg", "dosage": "500mg", "frequency": "Twice daily", "duration": "3 days"},
            ],
        }
        response = self.authenticate(self.nurse).post(reverse("prescriptions"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.authenticate(self.doctor).post(reverse("prescriptions"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data["data"]
        self.assertEqual(data["notes"], "after food")
        self.assertEqual(data["doctor"], "Ravi Kumar")

        pharmacist = self.authenticate(self.pharmacist)
        url = reverse("prescription_process", args=[data["id"]])
        too_many = {"dispensed": [{"itemId": data["items"][0]["id"], "quantityDispensed": 60}]}
        response = pharmacist.post(url, too_many, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])

        enough = {"dispensed": [{"itemId": data["items"][0]["id"], "quantityDispensed": 6}]}
        response = pharmacist.post(url, enough, format="json")
        self.assertEqual(response.data["data"]["status"], "Processing")
        self.assertEqual(Drug.objects.get().current_stock, 44)

        response = pharmacist.post(reverse("prescription_complete", args=[data["id"]]))
        self.assertEqual(response.data["data"]["status"], "Completed")

        stats = self.authenticate(self.nurse).get(reverse("pharmacy_stats")).data["data"]
        self.assertEqual(stats["completedPrescriptionsToday"], 1)
        self.assertEqual(stats["topMedications"], [{"name": "Paracetamol 500mg", "count": 1}])
        self.assertEqual(len(stats["trends"]), 7)

    # -- users ------------------------------------------------------------------

    def test_user_management_is_admin_only(self):
        payload = {"username": "reception2", "name": "Kavya Iyer", "role": "receptionist",
                   "password": "Recept!on-2024"}
        response = self.authenticate(self.doctor).post(reverse("users"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = self.authenticate(self.admin_user)
        response = admin.post(reverse("users"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        created = response.data["data"]
        self.assertEqual(created["name"], "Kavya Iyer")
        self.assertNotIn("password", created)

        duplicate = admin.post(reverse("users"), payload, format="json")
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Username already exists", duplicate.data["error"])

        response = admin.patch(reverse("user_detail", args=[created["id"]]), {"role": "nurse"}, format="json")
        self.assertEqual(response.data["data"]["role"], "nurse")

        response = admin.post(reverse("user_toggle_status", args=[created["id"]]))
        self.assertEqual(response.data["data"]["status"], "INACTIVE")
        login = APIClient().post(reverse("login_view"),
                                 {"username": "reception2", "password": "Recept!on-2024"}, format="json")
        self.assertEqual(login.status_code, status.HTTP_400_BAD_REQUEST)

        stats = admin.get(reverse("user_stats")).data["data"]
        self.assertEqual(stats["byRole"]["admin"], 1)
        self.assertEqual(stats["inactive"], 1)

        response = admin.delete(reverse("user_detail", args=[created["id"]]))
        self.assertTrue(response.data["data"]["deleted"])
        self.assertEqual(admin.get(reverse("user_detail", args=[created["id"]])).status_code, 404)

    # -- ops --------------------------------------------------------------------

    def test_healthz(self):
        response = APIClient().get(reverse("healthz"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "data": {"db": True}})
