from __future__ import annotations

import os
import time
from datetime import timedelta
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from apps.common.exceptions import ValidationError
from apps.common.tests_utils import AdminAuthMixin, make_puzzle, make_submission
from apps.submissions.models import Submission

from .models import Puzzle
from .repo import PuzzleRepo
from .schemas import PuzzleCreateSchema, normalize_tags, parse_deadline
from .services import base_slug, unique_slug
from .tasks import sweep_orphan_uploads

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def png_upload(name: str = "clue.png") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, PNG_BYTES, content_type="image/png")


class PuzzleModelTests(TestCase):
    def test_status_follows_deadline(self):
        self.assertEqual(make_puzzle(title="Future", deadline_delta=timedelta(minutes=5)).status, "active")
        self.assertEqual(make_puzzle(title="Past", deadline_delta=-timedelta(minutes=5)).status, "closed")

    def test_deadline_equal_to_now_is_closed(self):
        puzzle = make_puzzle(title="Edge")
        self.assertFalse(puzzle.is_open(puzzle.deadline))
        self.assertTrue(puzzle.is_open(puzzle.deadline - timedelta(seconds=1)))


class PuzzleSchemaTests(TestCase):
    def test_tags_from_comma_string_or_list(self):
        self.assertEqual(normalize_tags(" logic, ,math ,"), ["logic", "math"])
        self.assertEqual(normalize_tags(["a ", "", " b"]), ["a", "b"])
        self.assertEqual(normalize_tags(""), [])

    def test_naive_deadline_uses_server_timezone(self):
        parsed = parse_deadline("2030-01-02T03:04:05")
        self.assertTrue(timezone.is_aware(parsed))
        self.assertEqual(parsed.year, 2030)

    def test_invalid_deadline_rejected(self):
        with self.assertRaises(ValidationError):
            parse_deadline("next tuesday")

    def test_camel_case_aliases(self):
        schema = PuzzleCreateSchema.from_dict(
            {
                "title": "T",
                "description": "D",
                "difficulty": "Easy",
                "format": "text",
                "deadline": "2030-01-01T00:00:00Z",
                "solutionText": "answer is 4",
                "isActive": "false",
            }
        )
        self.assertEqual(schema.solution_text, "answer is 4")
        self.assertFalse(schema.is_active)


class SlugTests(TestCase):
    def test_base_slug(self):
        self.assertEqual(base_slug("The  Missing Cat!"), "the-missing-cat")
        self.assertEqual(base_slug("谜题"), "puzzle")

    def test_collision_appends_millis_suffix(self):
        make_puzzle(title="Dup", slug="dup")
        slug = unique_slug("Dup", repo=PuzzleRepo())
        self.assertRegex(slug, r"^dup-\d{13}$")

    def test_same_title_does_not_collide_with_itself(self):
        puzzle = make_puzzle(title="Mine", slug="mine")
        self.assertEqual(unique_slug("Mine", repo=PuzzleRepo(), exclude_id=puzzle.id), "mine")


class PublicPuzzleApiTests(AdminAuthMixin, APITestCase):
    def test_list_newest_first(self):
        older = make_puzzle(title="Older", created_at=timezone.now() - timedelta(days=1))
        newer = make_puzzle(title="Newer")
        resp = self.client.get("/api/puzzles")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([p["id"] for p in resp.data["data"]["items"]], [newer.id, older.id])

    def test_detail_hides_solution_until_closed(self):
        open_puzzle = make_puzzle(title="Open", solution_text="secret")
        closed_puzzle = make_puzzle(title="Closed", deadline_delta=-timedelta(hours=1), solution_text="revealed")
        open_data = self.client.get(f"/api/puzzles/{open_puzzle.id}").data["data"]["puzzle"]
        closed_data = self.client.get(f"/api/puzzles/{closed_puzzle.id}").data["data"]["puzzle"]
        self.assertEqual(open_data["status"], "active")
        self.assertNotIn("solution_text", open_data)
        self.assertEqual(closed_data["status"], "closed")
        self.assertEqual(closed_data["solution_text"], "revealed")

    def test_detail_missing_returns_404(self):
        self.assertEqual(self.client.get("/api/puzzles/999999").status_code, 404)

    def test_latest_active(self):
        make_puzzle(title="Closed", deadline_delta=-timedelta(hours=1))
        make_puzzle(title="Inactive", is_active=False)
        active = make_puzzle(title="Active", created_at=timezone.now() - timedelta(minutes=1))
        resp = self.client.get("/api/puzzles/latest/active")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["puzzle"]["id"], active.id)

    def test_latest_active_none(self):
        make_puzzle(title="Closed", deadline_delta=-timedelta(hours=1))
        resp = self.client.get("/api/puzzles/latest/active")
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.data["data"]["puzzle"])


class AdminPuzzleApiTests(AdminAuthMixin, APITestCase):
    create_url = "/api/admin/puzzles"

    def setUp(self):
        super().setUp()
        self.admin = self.auth_client()
        self.deadline = (timezone.now() + timedelta(days=1)).isoformat()

    def _form(self, **overrides):
        form = {
            "title": "Cat Hunt",
            "description": "Where is the cat?",
            "difficulty": "Hard",
            "format": "text",
            "deadline": self.deadline,
            "tags": "logic, cats",
        }
        form.update(overrides)
        return form

    def test_create_text_puzzle_json(self):
        payload = self._form(tags=["logic", " cats "], solutionText="behind the sofa")
        resp = self.admin.post(self.create_url, payload, format="json")
        self.assertEqual(resp.status_code, 201)
        data = resp.data["data"]["puzzle"]
        self.assertEqual(data["slug"], "cat-hunt")
        self.assertEqual(data["tags"], ["logic", "cats"])
        self.assertEqual(data["status"], "active")
        self.assertEqual(data["solution_text"], "behind the sofa")
        self.assertTrue(data["is_active"])

    def test_create_with_files_multipart(self):
        form = self._form(format="image", puzzle_file=png_upload(), solutionFile=png_upload("answer.png"))
        resp = self.admin.post(self.create_url, form, format="multipart")
        self.assertEqual(resp.status_code, 201)
        puzzle = Puzzle.objects.get()
        self.assertTrue(puzzle.file_path.startswith("puzzles/"))
        self.assertTrue(os.path.exists(os.path.join(self.media_root, puzzle.file_path)))
        self.assertTrue(os.path.exists(os.path.join(self.media_root, puzzle.solution_file_path)))
        self.assertEqual(resp.data["data"]["puzzle"]["file_url"], f"/files/{puzzle.file_path}")

        served = self.client.get(f"/files/{puzzle.file_path}")
        self.assertEqual(served.status_code, 200)
        self.assertEqual(b"".join(served.streaming_content), PNG_BYTES)

    def test_image_format_requires_file(self):
        resp = self.admin.post(self.create_url, self._form(format="pdf"), format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Puzzle.objects.exists())

    def test_rejects_unsupported_upload(self):
        bad = SimpleUploadedFile("run.exe", b"MZ", content_type="application/octet-stream")
        resp = self.admin.post(self.create_url, self._form(puzzle_file=bad), format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(Puzzle.objects.exists())

    def test_missing_required_field(self):
        form = self._form()
        form.pop("difficulty")
        resp = self.admin.post(self.create_url, form, format="multipart")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], 40002)

    def test_failed_insert_removes_written_files(self):
        with patch("apps.puzzles.services.PuzzleRepo.create", side_effect=RuntimeError("db down")):
            resp = self.admin.post(
                self.create_url, self._form(format="image", puzzle_file=png_upload()), format="multipart"
            )
        self.assertEqual(resp.status_code, 500)
        upload_dir = os.path.join(self.media_root, "puzzles")
        leftovers = os.listdir(upload_dir) if os.path.isdir(upload_dir) else []
        self.assertEqual(leftovers, [])

    def test_duplicate_title_gets_suffixed_slug(self):
        first = self.admin.post(self.create_url, self._form(), format="json").data["data"]["puzzle"]
        second = self.admin.post(self.create_url, self._form(), format="json").data["data"]["puzzle"]
        self.assertEqual(first["slug"], "cat-hunt")
        self.assertRegex(second["slug"], r"^cat-hunt-\d+$")

    def test_create_requires_admin(self):
        resp = self.client.post(self.create_url, self._form(), format="json")
        self.assertEqual(resp.status_code, 401)

    def test_partial_update_regenerates_slug(self):
        puzzle = make_puzzle(title="Before", slug="before")
        resp = self.admin.patch(
            f"/api/admin/puzzles/{puzzle.id}", {"title": "After Edit", "isActive": False}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        puzzle.refresh_from_db()
        self.assertEqual(puzzle.slug, "after-edit")
        self.assertFalse(puzzle.is_active)
        self.assertEqual(puzzle.description, "Find the missing number.")

    def test_update_replaces_file_after_commit(self):
        created = self.admin.post(
            self.create_url, self._form(format="image", puzzle_file=png_upload()), format="multipart"
        )
        puzzle = Puzzle.objects.get(pk=created.data["data"]["puzzle"]["id"])
        old_path = os.path.join(self.media_root, puzzle.file_path)
        with self.captureOnCommitCallbacks(execute=True):
            resp = self.admin.patch(
                f"/api/admin/puzzles/{puzzle.id}", {"puzzle_file": png_upload("new.png")}, format="multipart"
            )
        self.assertEqual(resp.status_code, 200)
        puzzle.refresh_from_db()
        self.assertFalse(os.path.exists(old_path))
        self.assertTrue(os.path.exists(os.path.join(self.media_root, puzzle.file_path)))

    def test_update_missing_returns_404(self):
        resp = self.admin.patch("/api/admin/puzzles/999999", {"title": "x"}, format="json")
        self.assertEqual(resp.status_code, 404)

    def test_delete_cascades_to_submissions_and_files(self):
        created = self.admin.post(
            self.create_url, self._form(format="image", puzzle_file=png_upload()), format="multipart"
        )
        puzzle = Puzzle.objects.get(pk=created.data["data"]["puzzle"]["id"])
        stored = os.path.join(self.media_root, puzzle.file_path)
        make_submission(puzzle, name="Ada")
        make_submission(puzzle, name="Bob", status=Submission.Status.PENDING)

        with patch("apps.puzzles.services.invalidate_leaderboard_cache") as invalidate:
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.admin.delete(f"/api/admin/puzzles/{puzzle.id}")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Puzzle.objects.filter(pk=puzzle.id).exists())
        self.assertFalse(Submission.objects.filter(puzzle_id=puzzle.id).exists())
        self.assertFalse(os.path.exists(stored))
        invalidate.assert_called_once()
        self.assertEqual(self.client.get(f"/api/puzzles/{puzzle.id}").status_code, 404)

    def test_delete_missing_returns_404(self):
        resp = self.admin.delete("/api/admin/puzzles/999999")
        self.assertEqual(resp.status_code, 404)


class OrphanSweepTests(AdminAuthMixin, TestCase):
    def test_sweep_removes_only_old_unreferenced_files(self):
        upload_dir = os.path.join(self.media_root, "puzzles")
        os.makedirs(upload_dir, exist_ok=True)
        referenced = os.path.join(upload_dir, "kept.png")
        orphan_old = os.path.join(upload_dir, "old.png")
        orphan_new = os.path.join(upload_dir, "new.png")
        for path in (referenced, orphan_old, orphan_new):
            with open(path, "wb") as fh:
                fh.write(PNG_BYTES)
        stale = time.time() - 7200
        os.utime(referenced, (stale, stale))
        os.utime(orphan_old, (stale, stale))
        make_puzzle(title="Has File", format=Puzzle.Format.IMAGE, file_path="puzzles/kept.png")

        removed = sweep_orphan_uploads()
        self.assertEqual(removed, 1)
        self.assertTrue(os.path.exists(referenced))
        self.assertFalse(os.path.exists(orphan_old))
        self.assertTrue(os.path.exists(orphan_new))
