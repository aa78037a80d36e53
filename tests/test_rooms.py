"""
Room management and participants: codes, capacity, nickname reuse and deletion.
"""
import string
import unittest

from extensions import db
from metislap.errors import ConflictError, NotFoundError, ValidationError
from metislap.models import Participant, Room
from metislap.models.room import FINISHED, QUIZ
from metislap.services.room_service import (
    create_room, delete_room, end_game, find_room_by_code, join_room, leave_room,
    list_participants, list_rooms, participant_by_token, start_game, update_room,
)
from metislap.services.utils import normalize_guess, normalize_room_code, random_room_code
from tests.base import MetisLapTestCase


class TestHelpers(unittest.TestCase):

    def test_room_code_shape(self):
        allowed = set(string.ascii_uppercase + string.digits)
        for _ in range(100):
            code = random_room_code()
            self.assertEqual(len(code), 6)
            self.assertTrue(set(code) <= allowed)

    def test_normalizers(self):
        self.assertEqual(normalize_room_code(" abc123 "), "ABC123")
        self.assertEqual(normalize_room_code(None), "")
        self.assertEqual(normalize_guess("  Ice  Cream "), "icecream")


class TestRooms(MetisLapTestCase):

    def setUp(self):
        super().setUp()
        self.instructor = self.make_instructor()

    def test_create_room_defaults(self):
        room = create_room(self.instructor, "Monday class", QUIZ)
        self.assertEqual(len(room.code), 6)
        self.assertEqual(room.max_participants, 30)
        self.assertEqual(room.status, "waiting")

    def test_create_room_validation(self):
        with self.assertRaises(ValidationError):
            create_room(self.instructor, "  ", QUIZ)
        with self.assertRaises(ValidationError):
            create_room(self.instructor, "Room", "bingo")
        with self.assertRaises(ValidationError):
            create_room(self.instructor, "Room", QUIZ, max_participants=0)

    def test_codes_are_unique(self):
        codes = {create_room(self.instructor, f"Room {i}", QUIZ).code for i in range(20)}
        self.assertEqual(len(codes), 20)

    def test_list_rooms_filters_by_owner_and_status(self):
        other = self.make_instructor(email="other@example.com")
        mine = create_room(self.instructor, "Mine", QUIZ)
        create_room(other, "Theirs", QUIZ)

        self.assertEqual([r.id for r in list_rooms(self.instructor)], [mine.id])
        self.assertEqual(list_rooms(self.instructor, status=FINISHED), [])

    def test_update_room(self):
        room = create_room(self.instructor, "Old", QUIZ)
        update_room(room, {"room_name": "New", "max_participants": 5})
        self.assertEqual(room.name, "New")
        self.assertEqual(room.max_participants, 5)

    def test_delete_in_progress_is_conflict(self):
        room = self.make_room(self.instructor, QUIZ)
        self.add_question(room, 1)
        start_game(room)
        with self.assertRaises(ConflictError):
            delete_room(room)

        end_game(room)
        room_id = room.id
        delete_room(room)
        self.assertIsNone(db.session.get(Room, room_id))


class TestParticipants(MetisLapTestCase):

    def setUp(self):
        super().setUp()
        self.instructor = self.make_instructor()
        self.room = self.make_room(self.instructor, QUIZ, code="JOIN42", max_participants=2)

    def test_join_is_case_insensitive(self):
        participant, room = join_room("join42", "Alice")
        self.assertEqual(room.id, self.room.id)
        self.assertTrue(participant.token)
        self.assertEqual(participant.score, 0)

    def test_nickname_length(self):
        with self.assertRaises(ValidationError):
            join_room("JOIN42", "A")
        with self.assertRaises(ValidationError):
            join_room("JOIN42", "x" * 21)

    def test_unknown_code(self):
        with self.assertRaises(NotFoundError):
            join_room("NOPE00", "Alice")

    def test_duplicate_active_nickname(self):
        join_room("JOIN42", "Alice")
        with self.assertRaises(ConflictError):
            join_room("JOIN42", "Alice")

    def test_capacity(self):
        join_room("JOIN42", "Alice")
        join_room("JOIN42", "Bob")
        with self.assertRaises(ConflictError):
            join_room("JOIN42", "Carol")

    def test_rejoin_reactivates_with_new_token(self):
        alice, _ = join_room("JOIN42", "Alice")
        alice.score = 70
        db.session.commit()
        old_token = alice.token
        leave_room(alice)

        again, _ = join_room("JOIN42", "Alice")

        self.assertEqual(again.id, alice.id)
        self.assertTrue(again.is_active)
        self.assertIsNone(again.left_at)
        self.assertEqual(again.score, 70)
        self.assertNotEqual(again.token, old_token)
        self.assertEqual(Participant.query.filter_by(room_id=self.room.id).count(), 1)
        with self.assertRaises(NotFoundError):
            participant_by_token(old_token)

    def test_leave_frees_a_seat(self):
        alice, _ = join_room("JOIN42", "Alice")
        join_room("JOIN42", "Bob")
        leave_room(alice)
        join_room("JOIN42", "Carol")
        self.assertEqual(self.room.active_participant_count(), 2)

    def test_leave_twice_is_conflict(self):
        alice, _ = join_room("JOIN42", "Alice")
        leave_room(alice)
        with self.assertRaises(ConflictError):
            leave_room(alice)

    def test_finished_room_hidden_from_lookup(self):
        self.add_question(self.room, 1)
        start_game(self.room)
        end_game(self.room)

        with self.assertRaises(ConflictError):
            find_room_by_code("JOIN42")
        self.assertEqual(find_room_by_code("JOIN42", include_finished=True).id, self.room.id)

    def test_participants_in_join_order(self):
        join_room("JOIN42", "Alice")
        join_room("JOIN42", "Bob")
        self.assertEqual([p.nickname for p in list_participants(self.room)], ["Alice", "Bob"])


if __name__ == "__main__":
    unittest.main()
