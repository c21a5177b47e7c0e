from __future__ import annotations

import shutil
import tempfile
from datetime import timedelta

from django.core.cache import cache
from django.test import override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from apps.puzzles.models import Puzzle
from apps.submissions.models import Submission

ADMIN_EMAIL = "admin@puzzles.test"
ADMIN_PASSWORD = "s3cret-pass"


class AdminAuthMixin:
    """
    提供统一的管理员登录与认证客户端构造工具，减少各测试用例的重复代码
    - 固定测试用管理员凭据
    - 每个用例使用独立的临时 MEDIA_ROOT
    - 清空限速缓存，避免登录节流在用例之间累积
    """

    login_url: str = "/api/admin/login"
    logout_url: str = "/api/admin/logout"
    client: APIClient  # 由 APITestCase 提供

    def setUp(self):
        super().setUp()
        cache.clear()
        self.media_root = tempfile.mkdtemp(prefix="puzzle-media-")
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)
        overrides = override_settings(
            ADMIN_EMAIL=ADMIN_EMAIL,
            ADMIN_PASSWORD=ADMIN_PASSWORD,
            MEDIA_ROOT=self.media_root,
        )
        overrides.enable()
        self.addCleanup(overrides.disable)

    def api_login(self, email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD, expect_status: int = 200) -> str:
        """
        登录并返回令牌，默认期望 200 状态
        """
        resp = self.client.post(self.login_url, {"email": email, "password": password}, format="json")
        if resp.status_code != expect_status:
            raise AssertionError(f"登录接口返回 {resp.status_code}，期望 {expect_status}，响应：{resp.content}")
        return resp.data["data"]["token"] if expect_status == 200 else ""

    def auth_client(self, token: str | None = None) -> APIClient:
        """
        构造附带 Authorization 头的 APIClient
        """
        token = token or self.api_login()
        client = APIClient()
        client.raise_request_exception = False
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client


def make_puzzle(*, title: str = "Sample Puzzle", deadline_delta: timedelta = timedelta(hours=1), **fields) -> Puzzle:
    """直接落库一道谜题，deadline_delta 为相对当前时间的偏移"""
    data = {
        "title": title,
        "slug": fields.pop("slug", None) or f"{title.lower().replace(' ', '-')}-{Puzzle.objects.count() + 1}",
        "description": "Find the missing number.",
        "difficulty": Puzzle.Difficulty.MEDIUM,
        "format": Puzzle.Format.TEXT,
        "deadline": timezone.now() + deadline_delta,
    }
    data.update(fields)
    return Puzzle.objects.create(**data)


def make_submission(
    puzzle: Puzzle,
    *,
    name: str,
    email: str = "",
    status: str = Submission.Status.CORRECT,
    minutes_ago: int = 0,
    answer: str = "42",
) -> Submission:
    """直接落库一条提交，minutes_ago 控制提交时间"""
    return Submission.objects.create(
        puzzle=puzzle,
        name=name,
        email=email,
        answer=answer,
        status=status,
        submitted_at=timezone.now() - timedelta(minutes=minutes_ago),
    )
