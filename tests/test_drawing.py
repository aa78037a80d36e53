"""
Drawing engine: rounds, guess normalization, rank scoring and the hidden word.
"""
import unittest
from unittest.mock import patch

from extensions import db
from metislap.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from metislap.models import DrawingGuess, DrawingRound
from metislap.models.drawing_round import FINISHED
from metislap.models.room import DRAWING, FINISHED as ROOM_FINISHED, IN_PROGRESS
from metislap.services.drawing_service import (
    ALREADY_CORRECT, current_round, rank_points, round_guesses, round_state,
    submit_guess, submit_snapshot,
)
from metislap.services.room_service import advance_game, end_game, leave_room, start_game
from tests.base import MetisLapTestCase


class TestRankPoints(unittest.TestCase):

    def test_points_by_rank(self):
        self.assertEqual([rank_points(n) for n in range(1, 8)], [100, 80, 60, 40, 20, 20, 20])


class TestDrawingRounds(MetisLapTestCase):

    def setUp(self):
        super().setUp()
        self.instructor = self.make_instructor()
        self.room = self.make_room(self.instructor, DRAWING)
        self.add_word(self.room, 1, "apple", hint="fruit")
        self.add_word(self.room, 2, "ice cream")
        self.drawer = self.join(self.room, "Dana")
        self.g1 = self.join(self.room, "Gabe")
        self.g2 = self.join(self.room, "Gina")

    def _start(self):
        start_game(self.room, drawer_id=self.drawer.id)
        return current_round(self.room)

    def test_drawing_scenario(self):
        """Mixed-case guess is correct: guesser +100, drawer +30."""
        r = self._start()

        result = submit_guess(r, self.g1, "Apple")

        self.assertTrue(result["guess"]["is_correct"])
        self.assertEqual(result["guess"]["points_earned"], 100)
        self.assertEqual(result["correct_answer"], "apple")
        db.session.refresh(self.g1)
        db.session.refresh(self.drawer)
        self.assertEqual(self.g1.score, 100)
        self.assertEqual(self.drawer.score, 30)

    def test_start_requires_drawer_in_room(self):
        with self.assertRaises(ValidationError):
            start_game(self.room)

        other = self.make_room(self.instructor, DRAWING, code="OTHER1")
        outsider = self.join(other, "Olga")
        with self.assertRaises(NotFoundError):
            start_game(self.room, drawer_id=outsider.id)

        db.session.refresh(self.room)
        self.assertNotEqual(self.room.status, IN_PROGRESS)

    def test_start_creates_first_round(self):
        r = self._start()
        self.assertEqual(self.room.current_round_index, 1)
        self.assertEqual(r.round_num, 1)
        self.assertEqual(r.drawer_id, self.drawer.id)
        self.assertEqual(r.word.word, "apple")

    def test_wrong_guess_scores_nothing(self):
        r = self._start()
        result = submit_guess(r, self.g1, "banana")
        self.assertFalse(result["guess"]["is_correct"])
        self.assertIsNone(result["correct_answer"])
        db.session.refresh(self.drawer)
        self.assertEqual(self.drawer.score, 0)

    def test_whitespace_is_ignored(self):
        start_game(self.room, drawer_id=self.drawer.id)
        advance_game(self.room, drawer_id=self.g2.id)
        r = current_round(self.room)
        self.assertEqual(r.word.word, "ice cream")

        result = submit_guess(r, self.g1, "  IceCream ")
        self.assertTrue(result["guess"]["is_correct"])

    def test_second_correct_guesser_gets_80(self):
        r = self._start()
        submit_guess(r, self.g1, "apple")
        second = submit_guess(r, self.g2, "APPLE")
        self.assertEqual(second["guess"]["points_earned"], 80)
        db.session.refresh(self.drawer)
        self.assertEqual(self.drawer.score, 60)

    def test_repeat_correct_guess_is_conflict(self):
        r = self._start()
        submit_guess(r, self.g1, "apple")
        with self.assertRaises(ConflictError) as ctx:
            submit_guess(r, self.g1, "apple")
        self.assertEqual(ctx.exception.msg, ALREADY_CORRECT)

    def test_repeat_correct_guess_caught_by_storage_constraint(self):
        r = self._start()
        submit_guess(r, self.g1, "apple")

        with patch("metislap.services.drawing_service._has_correct_guess", return_value=False):
            with self.assertRaises(ConflictError) as ctx:
                submit_guess(r, self.g1, "apple")
        self.assertEqual(ctx.exception.msg, ALREADY_CORRECT)

        db.session.refresh(self.g1)
        db.session.refresh(self.drawer)
        self.assertEqual(self.g1.score, 100)
        self.assertEqual(self.drawer.score, 30)
        self.assertEqual(DrawingGuess.query.filter_by(round_id=r.id, is_correct=True).count(), 1)

    def test_inactive_participant_cannot_guess(self):
        r = self._start()
        leave_room(self.g1)

        with self.assertRaises(ForbiddenError):
            submit_guess(r, self.g1, "apple")

        db.session.refresh(self.drawer)
        self.assertEqual(self.drawer.score, 0)
        self.assertEqual(DrawingGuess.query.filter_by(round_id=r.id).count(), 0)

    def test_wrong_guesses_may_repeat(self):
        r = self._start()
        submit_guess(r, self.g1, "pear")
        submit_guess(r, self.g1, "pear")
        self.assertEqual(DrawingGuess.query.filter_by(round_id=r.id).count(), 2)

    def test_drawer_cannot_guess(self):
        r = self._start()
        with self.assertRaises(ForbiddenError):
            submit_guess(r, self.drawer, "apple")

    def test_empty_guess_is_rejected(self):
        r = self._start()
        with self.assertRaises(ValidationError):
            submit_guess(r, self.g1, "   ")

    def test_snapshot_only_from_drawer(self):
        r = self._start()
        submit_snapshot(r, self.drawer, "data:image/png;base64,AAA")
        submit_snapshot(r, self.drawer, "data:image/png;base64,BBB")
        db.session.refresh(r)
        self.assertEqual(r.drawing_data, "data:image/png;base64,BBB")

        with self.assertRaises(ForbiddenError):
            submit_snapshot(r, self.g1, "data:image/png;base64,CCC")

    def test_advance_closes_round_and_finishes_past_last_word(self):
        first = self._start()
        advance_game(self.room, drawer_id=self.g1.id)

        db.session.refresh(first)
        self.assertEqual(first.status, FINISHED)
        self.assertIsNotNone(first.ended_at)
        second = current_round(self.room)
        self.assertEqual(second.round_num, 2)
        self.assertEqual(second.drawer_id, self.g1.id)

        with self.assertRaises(ConflictError):
            submit_guess(first, self.g2, "apple")

        advance_game(self.room)
        self.assertEqual(self.room.status, ROOM_FINISHED)
        self.assertIsNone(self.room.current_round_index)
        self.assertEqual(DrawingRound.query.filter_by(room_id=self.room.id, status="drawing").count(), 0)

    def test_advance_needs_drawer_when_a_word_remains(self):
        self._start()
        with self.assertRaises(ValidationError):
            advance_game(self.room)
        self.assertEqual(self.room.current_round_index, 1)

    def test_inactive_drawer_is_rejected(self):
        self._start()
        leave_room(self.g1)
        with self.assertRaises(ValidationError):
            advance_game(self.room, drawer_id=self.g1.id)

    def test_word_hidden_from_guessers(self):
        self._start()

        guesser_view = round_state(self.room, viewer=self.g1)
        self.assertIsNone(guesser_view["current_word"]["word"])
        self.assertEqual(guesser_view["current_word"]["hint"], "fruit")
        self.assertEqual(guesser_view["current_word"]["length"], 5)

        drawer_view = round_state(self.room, viewer=self.drawer)
        self.assertEqual(drawer_view["current_word"]["word"], "apple")

        instructor_view = round_state(self.room, reveal_word=True)
        self.assertEqual(instructor_view["current_word"]["word"], "apple")
        self.assertEqual(instructor_view["total_rounds"], 2)

    def test_round_state_after_end_is_empty(self):
        self._start()
        end_game(self.room)
        state = round_state(self.room)
        self.assertIsNone(state["current_round"])

    def test_round_guesses_stats(self):
        r = self._start()
        submit_guess(r, self.g1, "pear")
        submit_guess(r, self.g1, "apple")
        submit_guess(r, self.g2, "apple")

        data = round_guesses(r)
        self.assertEqual(data["stats"], {"total_guesses": 3, "correct_count": 2})
        self.assertEqual(data["guesses"][0]["participant"]["nickname"], "Gabe")


if __name__ == "__main__":
    unittest.main()
