from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase, override_settings
from rest_framework.test import APITestCase

from apps.common.exceptions import PuzzleNotFoundError
from apps.common.tests_utils import make_puzzle, make_submission
from apps.common.utils.redis_keys import leaderboard_key
from apps.submissions.models import Submission

from .services import CorrectSolverService, LeaderboardService, invalidate_leaderboard_cache, normalize_solver_name


class LeaderboardServiceTests(TestCase):
    """排行榜聚合：两阶段折叠与排序"""

    def setUp(self):
        self.a = make_puzzle(title="Puzzle A")
        self.b = make_puzzle(title="Puzzle B")
        self.c = make_puzzle(title="Puzzle C")
        self.service = LeaderboardService()

    def test_more_distinct_puzzles_ranks_higher(self):
        make_submission(self.a, name="Solo", minutes_ago=100)
        make_submission(self.a, name="Duo", minutes_ago=10)
        make_submission(self.b, name="Duo", minutes_ago=5)
        board = self.service.compute()
        self.assertEqual([(e["rank"], e["name"], e["correct_submissions"]) for e in board], [(1, "Duo", 2), (2, "Solo", 1)])

    def test_duplicate_correct_submissions_count_once(self):
        for minutes in (30, 20, 10):
            make_submission(self.a, name="Repeat", minutes_ago=minutes)
        make_submission(self.a, name="Once", minutes_ago=40)
        make_submission(self.b, name="Once", minutes_ago=35)
        board = self.service.compute()
        self.assertEqual(board[0]["name"], "Once")
        self.assertEqual(board[0]["correct_submissions"], 2)
        self.assertEqual(board[1]["name"], "Repeat")
        self.assertEqual(board[1]["correct_submissions"], 1)

    def test_ties_broken_by_earliest_first_correct(self):
        make_submission(self.a, name="Late", minutes_ago=5)
        make_submission(self.b, name="Early", minutes_ago=50)
        board = self.service.compute()
        self.assertEqual([e["name"] for e in board], ["Early", "Late"])

    def test_exact_ties_broken_by_name(self):
        puzzle = self.a
        same_time = make_submission(puzzle, name="Zed", minutes_ago=10).submitted_at
        Submission.objects.create(puzzle=puzzle, name="Amy", answer="42", status=Submission.Status.CORRECT, submitted_at=same_time)
        board = self.service.compute()
        self.assertEqual([e["name"] for e in board], ["Amy", "Zed"])
        self.assertEqual([e["rank"] for e in board], [1, 2])

    def test_only_correct_submissions_count(self):
        make_submission(self.a, name="Pending", status=Submission.Status.PENDING)
        make_submission(self.a, name="Wrong", status=Submission.Status.INCORRECT)
        self.assertEqual(self.service.compute(), [])

    def test_email_comes_from_earliest_solve(self):
        make_submission(self.b, name="Mail", email="late@example.com", minutes_ago=5)
        make_submission(self.a, name="Mail", email="early@example.com", minutes_ago=50)
        board = self.service.compute()
        self.assertEqual(board[0]["email"], "early@example.com")

    @override_settings(LEADERBOARD_LIMIT=2)
    def test_result_is_truncated_to_limit(self):
        for idx, name in enumerate(["One", "Two", "Three"]):
            make_submission(self.a, name=name, minutes_ago=60 - idx)
        board = self.service.compute()
        self.assertEqual(len(board), 2)
        self.assertEqual([e["name"] for e in board], ["One", "Two"])

    def test_same_input_same_output(self):
        make_submission(self.a, name="X", minutes_ago=3)
        make_submission(self.b, name="Y", minutes_ago=2)
        make_submission(self.c, name="Y", minutes_ago=1)
        self.assertEqual(self.service.compute(), self.service.compute())

    def test_cached_board_is_returned_without_recomputing(self):
        cached = [{"rank": 1, "name": "Cached", "email": "", "correct_submissions": 9}]
        with patch("apps.leaderboard.services.redis_client.get_json", return_value=cached) as get_json:
            self.assertEqual(self.service.execute(), cached)
        get_json.assert_called_once_with(leaderboard_key())

    def test_cache_miss_computes_and_stores(self):
        make_submission(self.a, name="Fresh")
        with patch("apps.leaderboard.services.redis_client.get_json", return_value=None), patch(
            "apps.leaderboard.services.redis_client.set_json"
        ) as set_json:
            board = self.service.execute()
        self.assertEqual(board[0]["name"], "Fresh")
        set_json.assert_called_once_with(leaderboard_key(), board, ex=self.service.cache_ttl_seconds)

    def test_invalidate_deletes_cache_key(self):
        with patch("apps.leaderboard.services.redis_client.delete") as delete:
            invalidate_leaderboard_cache()
        delete.assert_called_once_with(leaderboard_key())


class CorrectSolverServiceTests(TestCase):
    def setUp(self):
        self.puzzle = make_puzzle(title="Solver Puzzle")
        self.service = CorrectSolverService()

    def test_normalize_solver_name(self):
        self.assertEqual(normalize_solver_name("  Jane \t  DOE "), "jane doe")

    def test_names_collapse_to_earliest_display_name(self):
        make_submission(self.puzzle, name="Jane Doe", email="jane@example.com", minutes_ago=30)
        make_submission(self.puzzle, name="jane  doe", email="other@example.com", minutes_ago=10)
        make_submission(self.puzzle, name="Bob", minutes_ago=20)
        solvers = self.service.execute(self.puzzle.id)
        self.assertEqual(
            solvers,
            [
                {"name": "Jane Doe", "email": "jane@example.com"},
                {"name": "Bob", "email": ""},
            ],
        )

    def test_ignores_other_statuses_and_puzzles(self):
        other = make_puzzle(title="Other")
        make_submission(other, name="Elsewhere")
        make_submission(self.puzzle, name="Pending", status=Submission.Status.PENDING)
        self.assertEqual(self.service.execute(self.puzzle.id), [])

    def test_missing_puzzle_raises_not_found(self):
        with self.assertRaises(PuzzleNotFoundError):
            self.service.execute(999999)


class LeaderboardApiTests(APITestCase):
    def test_leaderboard_endpoint(self):
        puzzle = make_puzzle(title="Api Puzzle", deadline_delta=-timedelta(hours=1))
        make_submission(puzzle, name="Ada", email="ada@example.com")
        resp = self.client.get("/api/leaderboard")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.data["data"]["items"],
            [{"rank": 1, "name": "Ada", "email": "ada@example.com", "correct_submissions": 1}],
        )

    def test_correct_solvers_endpoint(self):
        puzzle = make_puzzle(title="Api Puzzle")
        make_submission(puzzle, name="Ada")
        resp = self.client.get(f"/api/puzzles/{puzzle.id}/correct")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["data"]["items"], [{"name": "Ada", "email": ""}])

    def test_correct_solvers_missing_puzzle(self):
        resp = self.client.get("/api/puzzles/999999/correct")
        self.assertEqual(resp.status_code, 404)
