# -*- coding: utf-8 -*-
"""
公共模块单测：
- 上传文件校验（类型/大小）与常用字段校验
- 管理员令牌认证（缺失/格式错误/过期/会话已注销）
- 统一响应与异常处理格式、健康检查
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import resolve
from django.utils import timezone
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import AccessToken

from apps.accounts.models import AdminSession
from apps.common.exceptions import TokenError, ValidationError
from apps.common.infra.jwt_provider import EMAIL_CLAIM, SESSION_CLAIM, issue_admin_token, verify_admin_token
from apps.common.infra.logger import JSONContextFormatter, PlainContextFormatter, logger_extra
from apps.common.tests_utils import AdminAuthMixin
from apps.common.utils.validators import require_text, validate_choice, validate_email, validate_upload_file


class UploadValidatorTests(TestCase):
    """校验上传文件的类型/大小限制"""

    def test_invalid_content_type_should_fail(self):
        bad = SimpleUploadedFile("bad.exe", b"hello", content_type="application/x-msdownload")
        with self.assertRaises(ValidationError):
            validate_upload_file(
                bad,
                allowed_content_types={"application/pdf"},
                allowed_suffixes={".pdf"},
                max_size_mb=1,
                field_name="附件",
            )

    def test_mismatched_suffix_should_fail(self):
        bad = SimpleUploadedFile("fake.pdf.exe", b"%PDF", content_type="application/pdf")
        with self.assertRaises(ValidationError):
            validate_upload_file(
                bad,
                allowed_content_types={"application/pdf"},
                allowed_suffixes={".pdf"},
                max_size_mb=1,
                field_name="附件",
            )

    def test_exceed_size_should_fail(self):
        big = SimpleUploadedFile("big.pdf", b"a" * (2 * 1024 * 1024 + 1), content_type="application/pdf")
        with self.assertRaises(ValidationError):
            validate_upload_file(
                big,
                allowed_content_types={"application/pdf"},
                allowed_suffixes={".pdf"},
                max_size_mb=2,
                field_name="附件",
            )

    def test_valid_upload_should_pass(self):
        ok = SimpleUploadedFile("ok.png", b"\x89PNG", content_type="image/png")
        # 不应抛出异常
        validate_upload_file(
            ok,
            allowed_content_types={"image/png"},
            allowed_suffixes={".png"},
            max_size_mb=2,
            field_name="附件",
        )


class FieldValidatorTests(TestCase):
    def test_require_text_strips_and_limits(self):
        self.assertEqual(require_text("  Ada  ", field_name="姓名", max_length=10), "Ada")
        with self.assertRaises(ValidationError):
            require_text("   ", field_name="姓名")
        with self.assertRaises(ValidationError):
            require_text("x" * 11, field_name="姓名", max_length=10)

    def test_validate_email(self):
        validate_email("solver@example.com")
        with self.assertRaises(ValidationError):
            validate_email("not-an-email")

    def test_validate_choice_reports_allowed_values(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_choice("maybe", ["pending", "correct"], field_name="状态")
        self.assertEqual(ctx.exception.extra["allowed"], ["pending", "correct"])

    def test_logger_extra_masks_sensitive_keys(self):
        extra = logger_extra({"password": "p", "Token": "t", "puzzle_id": 3})
        self.assertEqual(extra["password"], "***")
        self.assertEqual(extra["Token"], "***")
        self.assertEqual(extra["puzzle_id"], 3)

    def test_formatters_include_extra_fields(self):
        record = logging.makeLogRecord({"name": "apps.puzzles", "levelno": logging.INFO, "levelname": "INFO", "msg": "谜题已创建"})
        record.puzzle_id = 3
        self.assertIn("puzzle_id=3", PlainContextFormatter().format(record))
        entry = json.loads(JSONContextFormatter().format(record))
        self.assertEqual(entry["message"], "谜题已创建")
        self.assertEqual(entry["puzzle_id"], 3)


class AdminTokenTests(TestCase):
    def test_issue_and_verify_round_trip_claims(self):
        raw = issue_admin_token(session_id="abc123", email="admin@example.com")
        token = verify_admin_token(raw)
        self.assertEqual(token[SESSION_CLAIM], "abc123")
        self.assertEqual(token[EMAIL_CLAIM], "admin@example.com")

    def test_tampered_token_is_rejected(self):
        header, payload, signature = issue_admin_token(session_id="abc123", email="admin@example.com").split(".")
        forged = ".".join([header, payload, signature[::-1]])
        with self.assertRaises(TokenError) as ctx:
            verify_admin_token(forged)
        self.assertEqual(ctx.exception.code, 40102)


class AdminAuthenticationTests(AdminAuthMixin, APITestCase):
    """受保护接口的认证行为"""

    protected_url = "/api/admin/submissions"

    def test_missing_token_returns_401(self):
        resp = self.client.get(self.protected_url)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data["code"], 40100)

    def test_malformed_token_returns_401(self):
        self.client.credentials(HTTP_AUTHORIZATION="Bearer not.a.jwt")
        resp = self.client.get(self.protected_url)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data["code"], 40102)

    def test_expired_token_returns_401(self):
        session = AdminSession.objects.create()
        token = AccessToken()
        token.set_exp(from_time=timezone.now() - timedelta(days=2), lifetime=timedelta(hours=24))
        token[SESSION_CLAIM] = session.session_id
        token[EMAIL_CLAIM] = "admin@puzzles.test"
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        resp = self.client.get(self.protected_url)
        self.assertEqual(resp.status_code, 401)

    def test_token_for_unknown_session_returns_401(self):
        token = issue_admin_token(session_id="0" * 32, email="admin@puzzles.test")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        resp = self.client.get(self.protected_url)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.data["code"], 40102)

    def test_valid_token_passes(self):
        client = self.auth_client()
        resp = client.get(self.protected_url)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["code"], 0)
        self.assertEqual(resp.data["data"]["items"], [])


class HealthAndEnvelopeTests(APITestCase):
    def test_url_conf_loads_with_shared_item_schemas(self):
        # 多个列表接口共用同一个条目 serializer
        self.assertEqual(resolve("/api/admin/submissions").view_name, "admin-submissions:list")
        resp = self.client.get("/api/schema/", {"format": "json"})
        self.assertEqual(resp.status_code, 200)
        paths = json.loads(resp.content)["paths"]
        self.assertIn("/api/admin/submissions", paths)
        self.assertIn("/api/submissions/puzzle/{puzzle_id}", paths)

    def test_health_reports_database(self):
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        data = resp.data["data"]
        self.assertEqual(data["status"], "ok")
        self.assertEqual(data["database"], "connected")
        self.assertIn("timestamp", data)

    def test_not_found_uses_error_envelope(self):
        resp = self.client.get("/api/puzzles/999999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["code"], 40401)
        self.assertIsNone(resp.data["data"])
        self.assertTrue(resp.data["message"])

    def test_malformed_json_is_bad_request(self):
        resp = self.client.generic(
            "POST", "/api/submissions", data="{not json", content_type="application/json"
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], 40001)
