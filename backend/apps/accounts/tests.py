from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.common.throttles import LoginRateThrottle
from apps.common.tests_utils import ADMIN_EMAIL, ADMIN_PASSWORD, AdminAuthMixin, make_puzzle

from .models import AdminSession
from .tasks import purge_stale_admin_sessions


class AdminLoginTests(AdminAuthMixin, APITestCase):
    """登录 / 注销 / 令牌吊销"""

    def test_login_success_creates_session(self):
        resp = self.client.post(
            self.login_url,
            {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
            format="json",
            HTTP_USER_AGENT="pytest-agent",
            REMOTE_ADDR="10.0.0.8",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["code"], 0)
        self.assertTrue(resp.data["data"]["token"])
        session = AdminSession.objects.get()
        self.assertEqual(len(session.session_id), 32)
        self.assertEqual(session.user_agent, "pytest-agent")
        self.assertEqual(session.ip, "10.0.0.8")

    def test_email_is_trimmed_before_comparison(self):
        token = self.api_login(email=f"  {ADMIN_EMAIL} ")
        self.assertTrue(token)

    def test_wrong_password_returns_401(self):
        resp = self.client.post(self.login_url, {"email": ADMIN_EMAIL, "password": "nope"}, format="json")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data["code"], 40101)
        self.assertFalse(AdminSession.objects.exists())

    def test_wrong_email_returns_401(self):
        resp = self.client.post(
            self.login_url, {"email": "other@puzzles.test", "password": ADMIN_PASSWORD}, format="json"
        )
        self.assertEqual(resp.status_code, 401)

    def test_missing_fields_returns_400(self):
        resp = self.client.post(self.login_url, {"email": ADMIN_EMAIL}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], 40002)

    def test_each_login_gets_its_own_session(self):
        first = self.api_login()
        second = self.api_login()
        self.assertNotEqual(first, second)
        self.assertEqual(AdminSession.objects.count(), 2)

    def test_logout_revokes_token(self):
        token = self.api_login()
        client = self.auth_client(token)
        resp = client.post(self.logout_url)
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(AdminSession.objects.exists())

        # 同一令牌再次访问受保护接口
        resp = client.get("/api/admin/submissions")
        self.assertEqual(resp.status_code, 401)
        resp = client.post(self.logout_url)
        self.assertEqual(resp.status_code, 401)

    def test_public_routes_ignore_revoked_token(self):
        puzzle = make_puzzle(title="Still Public")
        client = self.auth_client()
        self.assertEqual(client.post(self.logout_url).status_code, 200)

        self.assertEqual(client.get("/api/puzzles").status_code, 200)
        self.assertEqual(client.get(f"/api/puzzles/{puzzle.id}").status_code, 200)
        self.assertEqual(client.get("/api/leaderboard").status_code, 200)
        resp = client.post(
            "/api/submissions", {"puzzleId": puzzle.id, "name": "Ada", "answer": "42"}, format="json"
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(client.get("/api/admin/submissions").status_code, 401)

    def test_public_routes_ignore_malformed_token(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not.a.jwt")
        self.assertEqual(self.client.get("/api/puzzles").status_code, 200)
        resp = self.client.get("/api/puzzles/latest/active")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.data["data"]["puzzle"])

    def test_logout_only_revokes_current_session(self):
        keep = self.auth_client()
        drop = self.auth_client()
        self.assertEqual(drop.post(self.logout_url).status_code, 200)
        self.assertEqual(keep.get("/api/admin/submissions").status_code, 200)

    def test_logout_without_token_returns_401(self):
        resp = self.client.post(self.logout_url)
        self.assertEqual(resp.status_code, 401)

    @patch.object(LoginRateThrottle, "rate", "2/min", create=True)
    def test_login_is_rate_limited(self):
        for _ in range(2):
            self.client.post(self.login_url, {"email": ADMIN_EMAIL, "password": "nope"}, format="json")
        resp = self.client.post(self.login_url, {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}, format="json")
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp.data["code"], 42900)
        self.assertIn("wait", resp.data["extra"])


class AdminSessionPurgeTests(TestCase):
    def test_purge_removes_sessions_older_than_token_lifetime(self):
        stale = AdminSession.objects.create(created_at=timezone.now() - timedelta(hours=25))
        fresh = AdminSession.objects.create()
        removed = purge_stale_admin_sessions()
        self.assertEqual(removed, 1)
        self.assertFalse(AdminSession.objects.filter(pk=stale.pk).exists())
        self.assertTrue(AdminSession.objects.filter(pk=fresh.pk).exists())
