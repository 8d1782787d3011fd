"""API tests through FastAPI TestClient: envelope, auth gate, complaint lifecycle."""

import unittest
from unittest.mock import patch

from app.core.security import verify_token
from app.models import Complaint

from factories import RecordingMailer, add_user, make_client, make_settings

PREFIX = "/api/v1"
LEAK = {
    "title": "Leak",
    "description": "Sink leaking",
    "category": "Technical",
    "priority": "High",
}


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = make_settings()
        self.client, self.session_factory, self.mailer = make_client(self.settings)
        add_user(
            self.session_factory,
            "admin@example.com",
            password="admin123456",
            name="System Administrator",
            role="admin",
        )

    def register(self, email: str, password: str = "secret123", name: str = "User A"):
        return self.client.post(
            f"{PREFIX}/auth/register",
            json={"email": email, "password": password, "name": name},
        )

    def login(self, email: str, password: str):
        return self.client.post(f"{PREFIX}/auth/login", json={"email": email, "password": password})

    def user_token(self, email: str = "a@example.com") -> str:
        return self.register(email).json()["data"]["token"]

    def admin_token(self) -> str:
        return self.login("admin@example.com", "admin123456").json()["data"]["token"]

    def stored_complaints(self) -> int:
        db = self.session_factory()
        try:
            return db.query(Complaint).count()
        finally:
            db.close()


class TestRegisterAndLogin(ApiTestCase):
    def test_register_returns_token_matching_user(self) -> None:
        resp = self.register("a@example.com", name="User A")
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "User registered successfully")
        user = body["data"]["user"]
        self.assertEqual(user["role"], "user")
        self.assertNotIn("password_hash", user)
        claims = verify_token(body["data"]["token"], self.settings)
        self.assertEqual(
            (claims["id"], claims["email"], claims["role"], claims["name"]),
            (user["id"], "a@example.com", "user", "User A"),
        )

    def test_duplicate_email_400(self) -> None:
        self.register("a@example.com")
        resp = self.register("a@example.com")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(
            resp.json(),
            {"success": False, "data": None, "message": None, "error": "User already exists with this email"},
        )

    def test_email_is_case_sensitive(self) -> None:
        self.register("a@example.com")
        self.assertEqual(self.register("A@example.com").status_code, 201)

    def test_register_validation_400(self) -> None:
        self.assertEqual(self.register("b@example.com", password="123").status_code, 400)
        resp = self.client.post(f"{PREFIX}/auth/register", json={"email": "c@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])

    def test_welcome_email_sent(self) -> None:
        self.register("a@example.com", name="User A")
        self.assertEqual(len(self.mailer.sent), 1)
        to_email, subject, _ = self.mailer.sent[0]
        self.assertEqual(to_email, "a@example.com")
        self.assertEqual(subject, "Welcome to Complaint Management System")

    def test_login_success(self) -> None:
        self.register("a@example.com", password="secret123")
        resp = self.login("a@example.com", "secret123")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Login successful")
        self.assertIsNotNone(verify_token(resp.json()["data"]["token"], self.settings))

    def test_login_failures_indistinguishable(self) -> None:
        self.register("a@example.com", password="secret123")
        wrong_password = self.login("a@example.com", "wrong-pass")
        unknown_email = self.login("nobody@example.com", "secret123")
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_email.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_email.json())
        self.assertEqual(wrong_password.json()["error"], "Invalid credentials")


class TestGate(ApiTestCase):
    def test_missing_token_401(self) -> None:
        resp = self.client.get(f"{PREFIX}/users/complaints")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Access token required")

    def test_invalid_token_401(self) -> None:
        resp = self.client.get(f"{PREFIX}/users/complaints", headers=_auth("garbage"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Invalid or expired token")

    def test_user_on_admin_route_403(self) -> None:
        token = self.user_token()
        for method, path in (
            ("get", "/complaints"),
            ("patch", "/complaints/1"),
            ("delete", "/complaints/1"),
        ):
            with self.subTest(method=method, path=path):
                kwargs = {"json": {"status": "Resolved"}} if method == "patch" else {}
                resp = getattr(self.client, method)(f"{PREFIX}{path}", headers=_auth(token), **kwargs)
                self.assertEqual(resp.status_code, 403)
                self.assertEqual(resp.json()["error"], "Admin access required")

    def test_admin_token_from_other_secret_rejected(self) -> None:
        client, session_factory, _ = make_client(make_settings(JWT_SECRET="other"))
        add_user(session_factory, "admin@example.com", password="admin123456", role="admin")
        foreign = client.post(
            f"{PREFIX}/auth/login", json={"email": "admin@example.com", "password": "admin123456"}
        ).json()["data"]["token"]
        resp = self.client.get(f"{PREFIX}/complaints", headers=_auth(foreign))
        self.assertEqual(resp.status_code, 401)


class TestComplaints(ApiTestCase):
    def test_create_forces_pending_and_notifies_admin(self) -> None:
        token = self.user_token()
        resp = self.client.post(
            f"{PREFIX}/complaints", json={**LEAK, "status": "Resolved"}, headers=_auth(token)
        )
        self.assertEqual(resp.status_code, 201)
        data = resp.json()["data"]
        self.assertEqual(data["status"], "Pending")
        self.assertEqual(resp.json()["message"], "Complaint submitted successfully")
        admin_mails = [m for m in self.mailer.sent if m[0] == "admin@example.com"]
        self.assertEqual(admin_mails[-1][1], "New Complaint: Leak")

    def test_missing_field_400_nothing_persisted(self) -> None:
        token = self.user_token()
        for field in LEAK:
            with self.subTest(field=field):
                body = {k: v for k, v in LEAK.items() if k != field}
                resp = self.client.post(f"{PREFIX}/complaints", json=body, headers=_auth(token))
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["error"], "All fields are required")
                resp = self.client.post(
                    f"{PREFIX}/complaints", json={**LEAK, field: ""}, headers=_auth(token)
                )
                self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.stored_complaints(), 0)

    def test_user_sees_only_own_complaints(self) -> None:
        token_a = self.user_token("a@example.com")
        token_b = self.user_token("b@example.com")
        self.client.post(f"{PREFIX}/complaints", json=LEAK, headers=_auth(token_a))
        self.client.post(
            f"{PREFIX}/complaints", json={**LEAK, "title": "B's"}, headers=_auth(token_b)
        )
        own = self.client.get(f"{PREFIX}/users/complaints", headers=_auth(token_a)).json()["data"]
        self.assertEqual([c["title"] for c in own], ["Leak"])
        everything = self.client.get(f"{PREFIX}/complaints", headers=_auth(self.admin_token()))
        self.assertEqual([c["title"] for c in everything.json()["data"]], ["B's", "Leak"])

    def test_admin_filters_and(self) -> None:
        token = self.user_token()
        self.client.post(f"{PREFIX}/complaints", json=LEAK, headers=_auth(token))
        self.client.post(
            f"{PREFIX}/complaints",
            json={**LEAK, "title": "Refund", "category": "Service", "priority": "Low"},
            headers=_auth(token),
        )
        admin = _auth(self.admin_token())
        resp = self.client.get(
            f"{PREFIX}/complaints",
            params={"status": "Pending", "priority": "High", "category": "Technical"},
            headers=admin,
        )
        self.assertEqual([c["title"] for c in resp.json()["data"]], ["Leak"])
        resp = self.client.get(
            f"{PREFIX}/complaints", params={"priority": "High", "category": "Service"}, headers=admin
        )
        self.assertEqual(resp.json()["data"], [])
        resp = self.client.get(f"{PREFIX}/complaints", params={"status": ""}, headers=admin)
        self.assertEqual(len(resp.json()["data"]), 2)

    def test_invalid_status_400_unchanged(self) -> None:
        token = self.user_token()
        complaint_id = self.client.post(
            f"{PREFIX}/complaints", json=LEAK, headers=_auth(token)
        ).json()["data"]["id"]
        admin = _auth(self.admin_token())
        for body in ({"status": "Closed"}, {"status": "resolved"}, {}):
            with self.subTest(body=body):
                resp = self.client.patch(f"{PREFIX}/complaints/{complaint_id}", json=body, headers=admin)
                self.assertEqual(resp.status_code, 400)
                self.assertEqual(resp.json()["error"], "Valid status is required")
        own = self.client.get(f"{PREFIX}/users/complaints", headers=_auth(token)).json()["data"]
        self.assertEqual(own[0]["status"], "Pending")

    def test_patch_unknown_or_malformed_id_404(self) -> None:
        token = self.user_token()
        complaint_id = self.client.post(
            f"{PREFIX}/complaints", json=LEAK, headers=_auth(token)
        ).json()["data"]["id"]
        self.assertEqual(complaint_id, 1)
        admin = _auth(self.admin_token())
        bad_ids = ("9999", "not-an-id", "9999999999999999999999999", "2147483648", "１", "1_0", "-1")
        for bad_id in bad_ids:
            with self.subTest(complaint_id=bad_id):
                resp = self.client.patch(
                    f"{PREFIX}/complaints/{bad_id}", json={"status": "Resolved"}, headers=admin
                )
                self.assertEqual(resp.status_code, 404)
                self.assertEqual(resp.json()["error"], "Complaint not found")
        own = self.client.get(f"{PREFIX}/users/complaints", headers=_auth(token)).json()["data"]
        self.assertEqual(own[0]["status"], "Pending")

    def test_delete_unknown_or_malformed_id_404(self) -> None:
        token = self.user_token()
        self.client.post(f"{PREFIX}/complaints", json=LEAK, headers=_auth(token))
        admin = _auth(self.admin_token())
        for bad_id in ("9999", "not-an-id", "9999999999999999999999999", "１", "1_0"):
            with self.subTest(complaint_id=bad_id):
                resp = self.client.delete(f"{PREFIX}/complaints/{bad_id}", headers=admin)
                self.assertEqual(resp.status_code, 404)
                self.assertEqual(resp.json()["error"], "Complaint not found")
        self.assertEqual(self.stored_complaints(), 1)

    def test_forbidden_transition_400_unchanged(self) -> None:
        token = self.user_token()
        complaint_id = self.client.post(
            f"{PREFIX}/complaints", json=LEAK, headers=_auth(token)
        ).json()["data"]["id"]
        admin = _auth(self.admin_token())
        self.client.patch(
            f"{PREFIX}/complaints/{complaint_id}", json={"status": "Resolved"}, headers=admin
        )
        sent_before = len(self.mailer.sent)
        closed = {"Resolved": frozenset({"Resolved", "In Progress"})}
        with patch.dict("app.services.complaint_status.ALLOWED_TRANSITIONS", closed):
            resp = self.client.patch(
                f"{PREFIX}/complaints/{complaint_id}", json={"status": "Pending"}, headers=admin
            )
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.json()["success"])
        self.assertEqual(resp.json()["error"], "Cannot change status from Resolved to Pending")
        self.assertEqual(len(self.mailer.sent), sent_before)
        own = self.client.get(f"{PREFIX}/users/complaints", headers=_auth(token)).json()["data"]
        self.assertEqual(own[0]["status"], "Resolved")

    def test_status_update_email_carries_old_status(self) -> None:
        token = self.user_token()
        complaint_id = self.client.post(
            f"{PREFIX}/complaints", json=LEAK, headers=_auth(token)
        ).json()["data"]["id"]
        self.client.patch(
            f"{PREFIX}/complaints/{complaint_id}",
            json={"status": "Resolved"},
            headers=_auth(self.admin_token()),
        )
        subject, body = self.mailer.sent[-1][1:]
        self.assertEqual(subject, "Complaint Status Updated: Leak")
        self.assertIn("Pending", body)
        self.assertIn("Resolved", body)


class TestBestEffortNotifications(unittest.TestCase):
    def test_mail_failure_does_not_fail_requests(self) -> None:
        client, session_factory, _ = make_client(mailer=RecordingMailer(fail=True))
        resp = client.post(
            f"{PREFIX}/auth/register",
            json={"email": "a@example.com", "password": "secret123", "name": "A"},
        )
        self.assertEqual(resp.status_code, 201)
        token = resp.json()["data"]["token"]
        resp = client.post(f"{PREFIX}/complaints", json=LEAK, headers=_auth(token))
        self.assertEqual(resp.status_code, 201)


class TestInternalErrors(ApiTestCase):
    def test_unexpected_error_is_generic_500(self) -> None:
        token = self.user_token()
        with patch(
            "app.api.v1.users.list_owned_by",
            side_effect=RuntimeError("connection reset by peer"),
        ):
            with self.assertLogs("app.main", level="ERROR"):
                resp = self.client.get(f"{PREFIX}/users/complaints", headers=_auth(token))
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["error"], "Internal server error")
        self.assertNotIn("connection reset", resp.text)

    def test_unknown_route_uses_envelope(self) -> None:
        resp = self.client.get(f"{PREFIX}/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertFalse(resp.json()["success"])


class TestEndToEnd(ApiTestCase):
    """User submits, admin lists/updates/deletes, user sees each change."""

    def test_complaint_lifecycle(self) -> None:
        user = _auth(self.user_token("a@example.com"))
        created = self.client.post(f"{PREFIX}/complaints", json=LEAK, headers=user)
        self.assertEqual(created.status_code, 201)
        complaint_id = created.json()["data"]["id"]

        admin = _auth(self.admin_token())
        listed = self.client.get(f"{PREFIX}/complaints", headers=admin).json()["data"]
        self.assertEqual([(c["id"], c["status"]) for c in listed], [(complaint_id, "Pending")])
        self.assertEqual(listed[0]["owner"]["email"], "a@example.com")

        patched = self.client.patch(
            f"{PREFIX}/complaints/{complaint_id}", json={"status": "In Progress"}, headers=admin
        )
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["data"]["status"], "In Progress")

        own = self.client.get(f"{PREFIX}/users/complaints", headers=user).json()["data"]
        self.assertEqual(own[0]["status"], "In Progress")

        deleted = self.client.delete(f"{PREFIX}/complaints/{complaint_id}", headers=admin)
        self.assertEqual(deleted.status_code, 200)
        self.assertEqual(
            deleted.json(),
            {"success": True, "data": None, "message": "Complaint deleted successfully", "error": None},
        )
        listed = self.client.get(f"{PREFIX}/complaints", headers=admin).json()["data"]
        self.assertEqual(listed, [])

        again = self.client.delete(f"{PREFIX}/complaints/{complaint_id}", headers=admin)
        self.assertEqual(again.status_code, 404)


class TestHealth(ApiTestCase):
    def test_health_reports_database(self) -> None:
        resp = self.client.get(f"{PREFIX}/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["database"], "connected")


if __name__ == "__main__":
    unittest.main()
