"""
Room lifecycle: the transition table and the start/advance/end/reset actions.
"""
import unittest

from extensions import db
from metislap.errors import ConflictError, ValidationError
from metislap.models import LogEntry
from metislap.models.room import DRAWING, FINISHED, IN_PROGRESS, LADDER, QUIZ, WAITING
from metislap.services.quiz_service import submit_answer
from metislap.services.room_service import (
    ADVANCE, END, RESET, START,
    advance_game, end_game, reset_room, start_game, transition,
)
from tests.base import MetisLapTestCase


class TestTransition(unittest.TestCase):

    def test_allowed_transitions(self):
        self.assertEqual(transition(WAITING, START), IN_PROGRESS)
        self.assertEqual(transition(IN_PROGRESS, ADVANCE), IN_PROGRESS)
        self.assertEqual(transition(IN_PROGRESS, END), FINISHED)
        self.assertEqual(transition(IN_PROGRESS, RESET), WAITING)
        self.assertEqual(transition(FINISHED, RESET), WAITING)

    def test_rejected_transitions(self):
        for status, action in [
            (IN_PROGRESS, START),
            (FINISHED, START),
            (WAITING, ADVANCE),
            (FINISHED, ADVANCE),
            (WAITING, END),
            (FINISHED, END),
            (WAITING, RESET),
        ]:
            with self.subTest(status=status, action=action):
                with self.assertRaises(ConflictError):
                    transition(status, action)

    def test_unknown_action(self):
        with self.assertRaises(ValidationError):
            transition(WAITING, "explode")


class TestLifecycle(MetisLapTestCase):

    def setUp(self):
        super().setUp()
        self.instructor = self.make_instructor()

    def test_start_requires_content(self):
        quiz_room = self.make_room(self.instructor, QUIZ, code="QUIZ01")
        with self.assertRaises(ValidationError):
            start_game(quiz_room)

        ladder_room = self.make_room(self.instructor, LADDER, code="LADR01")
        self.add_item(ladder_room, 0, "Only one")
        with self.assertRaises(ValidationError):
            start_game(ladder_room)

        drawing_room = self.make_room(self.instructor, DRAWING, code="DRAW01")
        with self.assertRaises(ValidationError):
            start_game(drawing_room)

        db.session.refresh(quiz_room)
        self.assertEqual(quiz_room.status, WAITING)
        self.assertIsNone(quiz_room.started_at)

    def test_quiz_start_sets_pointer_and_timestamp(self):
        room = self.make_room(self.instructor, QUIZ)
        self.add_question(room, 1)

        start_game(room)

        self.assertEqual(room.status, IN_PROGRESS)
        self.assertEqual(room.current_question_index, 1)
        self.assertIsNotNone(room.started_at)

    def test_start_twice_is_conflict(self):
        room = self.make_room(self.instructor, QUIZ)
        self.add_question(room, 1)
        start_game(room)

        with self.assertRaises(ConflictError):
            start_game(room)

    def test_quiz_advance_past_last_finishes(self):
        room = self.make_room(self.instructor, QUIZ)
        self.add_question(room, 1)
        self.add_question(room, 2)
        start_game(room)

        advance_game(room)
        self.assertEqual(room.current_question_index, 2)
        self.assertEqual(room.status, IN_PROGRESS)

        advance_game(room)
        self.assertEqual(room.status, FINISHED)
        self.assertIsNone(room.current_question_index)
        self.assertIsNotNone(room.ended_at)

    def test_end_then_advance_is_conflict(self):
        room = self.make_room(self.instructor, QUIZ)
        self.add_question(room, 1)
        start_game(room)
        end_game(room)

        with self.assertRaises(ConflictError):
            advance_game(room)
        with self.assertRaises(ConflictError):
            end_game(room)

    def test_reset_scenario(self):
        """Finished quiz reset to waiting keeps content and scores, then can start again."""
        room = self.make_room(self.instructor, QUIZ)
        q1 = self.add_question(room, 1, correct="A", points=100)
        self.add_question(room, 2, correct="B")
        alice = self.join(room, "Alice")

        start_game(room)
        submit_answer(q1, alice, "A")
        end_game(room)
        self.assertEqual(room.status, FINISHED)

        reset_room(room)

        self.assertEqual(room.status, WAITING)
        self.assertIsNone(room.current_question_index)
        self.assertIsNone(room.current_round_index)
        self.assertIsNone(room.started_at)
        self.assertIsNone(room.ended_at)
        self.assertEqual(len(room.questions), 2)
        db.session.refresh(alice)
        self.assertEqual(alice.score, 100)

        start_game(room)
        self.assertEqual(room.status, IN_PROGRESS)
        self.assertEqual(room.current_question_index, 1)

    def test_reset_waiting_room_is_conflict(self):
        room = self.make_room(self.instructor, QUIZ)
        with self.assertRaises(ConflictError):
            reset_room(room)

    def test_lifecycle_events_are_logged(self):
        room = self.make_room(self.instructor, QUIZ)
        self.add_question(room, 1)
        start_game(room)
        end_game(room)

        messages = [e.message for e in LogEntry.query.order_by(LogEntry.id).all()]
        self.assertTrue(any("started" in m for m in messages))
        self.assertTrue(any("ended" in m for m in messages))


if __name__ == "__main__":
    unittest.main()
