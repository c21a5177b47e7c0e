from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from rest_framework.test import APITestCase

from apps.common.tests_utils import AdminAuthMixin, make_puzzle, make_submission

from .models import Submission


class SubmissionIntakeTests(AdminAuthMixin, APITestCase):
    """公开的答案提交接口"""

    url = "/api/submissions"

    def setUp(self):
        super().setUp()
        self.open_puzzle = make_puzzle(title="Open Puzzle", deadline_delta=timedelta(hours=1))
        self.closed_puzzle = make_puzzle(title="Closed Puzzle", deadline_delta=-timedelta(hours=1))

    def _payload(self, **overrides):
        payload = {
            "puzzleId": self.open_puzzle.id,
            "name": "  Ada Lovelace ",
            "email": " Ada@Example.COM ",
            "answer": "42",
        }
        payload.update(overrides)
        return payload

    def test_submit_to_open_puzzle(self):
        resp = self.client.post(self.url, self._payload(), format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["code"], 0)
        submission = Submission.objects.get(pk=resp.data["data"]["submission_id"])
        self.assertEqual(submission.puzzle_id, self.open_puzzle.id)
        self.assertEqual(submission.name, "Ada Lovelace")
        self.assertEqual(submission.email, "ada@example.com")
        self.assertEqual(submission.comments, "")
        self.assertEqual(submission.status, Submission.Status.PENDING)

    def test_snake_case_puzzle_id_is_accepted(self):
        payload = self._payload()
        payload["puzzle_id"] = payload.pop("puzzleId")
        resp = self.client.post(self.url, payload, format="json")
        self.assertEqual(resp.status_code, 201)

    def test_same_input_accepted_before_deadline_rejected_after(self):
        ok = self.client.post(self.url, self._payload(), format="json")
        late = self.client.post(self.url, self._payload(puzzleId=self.closed_puzzle.id), format="json")
        self.assertEqual(ok.status_code, 201)
        self.assertEqual(late.status_code, 400)
        self.assertEqual(late.data["code"], 46002)
        self.assertFalse(Submission.objects.filter(puzzle=self.closed_puzzle).exists())

    def test_deadline_equal_to_now_is_closed(self):
        frozen = self.open_puzzle.deadline
        with patch("apps.submissions.services.timezone.now", return_value=frozen):
            resp = self.client.post(self.url, self._payload(), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], 46002)

    def test_unknown_puzzle_returns_404(self):
        resp = self.client.post(self.url, self._payload(puzzleId=999999), format="json")
        self.assertEqual(resp.status_code, 404)

    def test_duplicate_submissions_are_kept(self):
        for _ in range(2):
            self.assertEqual(self.client.post(self.url, self._payload(), format="json").status_code, 201)
        self.assertEqual(Submission.objects.filter(puzzle=self.open_puzzle).count(), 2)

    def test_validation_errors(self):
        cases = [
            self._payload(name="   "),
            self._payload(answer=""),
            self._payload(email="not-an-email"),
            self._payload(name="x" * 201),
            self._payload(answer="x" * 10001),
            self._payload(comments="x" * 5001),
            self._payload(puzzleId=None),
            self._payload(puzzleId="abc"),
        ]
        for payload in cases:
            resp = self.client.post(self.url, payload, format="json")
            self.assertEqual(resp.status_code, 400, payload)
            self.assertEqual(resp.data["code"], 40002)
        self.assertFalse(Submission.objects.exists())

    def test_empty_email_is_allowed(self):
        resp = self.client.post(self.url, self._payload(email=""), format="json")
        self.assertEqual(resp.status_code, 201)

    def test_form_encoded_submission(self):
        resp = self.client.post(self.url, self._payload(comments="via form"), format="multipart")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(Submission.objects.get().comments, "via form")


class SubmissionListTests(AdminAuthMixin, APITestCase):
    def setUp(self):
        super().setUp()
        self.puzzle = make_puzzle(title="Listing Puzzle")
        self.other = make_puzzle(title="Other Puzzle")
        self.old = make_submission(self.puzzle, name="Old", minutes_ago=30, status=Submission.Status.PENDING)
        self.new = make_submission(self.puzzle, name="New", minutes_ago=1, status=Submission.Status.PENDING)
        make_submission(self.other, name="Elsewhere", minutes_ago=5)

    def test_public_list_for_puzzle_newest_first(self):
        resp = self.client.get(f"/api/submissions/puzzle/{self.puzzle.id}")
        self.assertEqual(resp.status_code, 200)
        ids = [item["id"] for item in resp.data["data"]["items"]]
        self.assertEqual(ids, [self.new.id, self.old.id])

    def test_public_list_for_unknown_puzzle_is_empty(self):
        resp = self.client.get("/api/submissions/puzzle/999999")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["items"], [])

    def test_admin_list_all_includes_puzzle_title(self):
        client = self.auth_client()
        resp = client.get("/api/admin/submissions")
        self.assertEqual(resp.status_code, 200)
        items = resp.data["data"]["items"]
        self.assertEqual(len(items), 3)
        self.assertEqual(items[0]["id"], self.new.id)
        self.assertEqual(items[0]["puzzle_title"], "Listing Puzzle")

    def test_admin_lists_include_answer_for_grading(self):
        graded = make_submission(self.other, name="Grader", answer="the tortoise")
        client = self.auth_client()
        items = client.get("/api/admin/submissions").data["data"]["items"]
        by_id = {item["id"]: item for item in items}
        self.assertEqual(by_id[graded.id]["answer"], "the tortoise")
        items = client.get(f"/api/admin/puzzles/{self.puzzle.id}/submissions").data["data"]["items"]
        self.assertEqual([item["answer"] for item in items], ["42", "42"])

    def test_admin_list_for_puzzle(self):
        client = self.auth_client()
        resp = client.get(f"/api/admin/puzzles/{self.puzzle.id}/submissions")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.data["data"]["items"]), 2)

    def test_admin_list_for_missing_puzzle_returns_404(self):
        client = self.auth_client()
        resp = client.get("/api/admin/puzzles/999999/submissions")
        self.assertEqual(resp.status_code, 404)


class SubmissionAdminTests(AdminAuthMixin, APITestCase):
    def setUp(self):
        super().setUp()
        self.puzzle = make_puzzle(title="Review Puzzle")
        self.submission = make_submission(self.puzzle, name="Grace", status=Submission.Status.PENDING)
        self.admin = self.auth_client()

    def _url(self, submission_id=None):
        return f"/api/admin/submissions/{submission_id or self.submission.id}"

    def test_update_status(self):
        with patch("apps.submissions.services.invalidate_leaderboard_cache") as invalidate:
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.admin.patch(self._url(), {"status": "correct"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["submission"]["status"], "correct")
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, Submission.Status.CORRECT)
        invalidate.assert_called_once()

    def test_status_can_move_back_to_pending(self):
        self.admin.patch(self._url(), {"status": "incorrect"}, format="json")
        resp = self.admin.patch(self._url(), {"status": "pending"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, Submission.Status.PENDING)

    def test_invalid_status_is_rejected(self):
        resp = self.admin.patch(self._url(), {"status": "maybe"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], 40002)
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.status, Submission.Status.PENDING)

    def test_update_missing_submission_returns_404(self):
        resp = self.admin.patch(self._url(999999), {"status": "correct"}, format="json")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["code"], 40402)

    def test_delete_submission(self):
        with patch("apps.submissions.services.invalidate_leaderboard_cache") as invalidate:
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.admin.delete(self._url())
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Submission.objects.filter(pk=self.submission.pk).exists())
        invalidate.assert_called_once()

    def test_delete_missing_submission_returns_404(self):
        resp = self.admin.delete(self._url(999999))
        self.assertEqual(resp.status_code, 404)

    def test_admin_routes_require_token(self):
        resp = self.client.patch(self._url(), {"status": "correct"}, format="json")
        self.assertEqual(resp.status_code, 401)
        resp = self.client.delete(self._url())
        self.assertEqual(resp.status_code, 401)
