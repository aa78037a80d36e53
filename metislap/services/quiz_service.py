"""Quiz engine: independent per-participant pacing through the question list."""

import logging

from sqlalchemy.exc import IntegrityError

from extensions import db
from metislap.errors import ConflictError, ForbiddenError, ValidationError
from metislap.models import Participant, QuizAnswer, QuizQuestion
from metislap.models.room import IN_PROGRESS, QUIZ
from metislap.services.game_engine import GameEngine

logger = logging.getLogger(__name__)

ALREADY_ANSWERED = "Already answered: you have already submitted an answer to this question."


def count_questions(room_id):
    return QuizQuestion.query.filter_by(room_id=room_id).count()


def _room_question_ids(room_id):
    return db.select(QuizQuestion.id).where(QuizQuestion.room_id == room_id)


def _clear_answers(room):
    # Answers from an earlier run of this room would mark everyone as done.
    QuizAnswer.query.filter(QuizAnswer.question_id.in_(_room_question_ids(room.id)))\
        .delete(synchronize_session="fetch")


class QuizEngine(GameEngine):
    game_type = QUIZ

    def start(self, room, **options):
        if count_questions(room.id) == 0:
            raise ValidationError("No questions: add at least one quiz question before starting.")

        _clear_answers(room)
        room.current_question_index = 1

    def advance(self, room, **options):
        next_index = (room.current_question_index or 0) + 1
        if next_index > count_questions(room.id):
            return False
        room.current_question_index = next_index
        return True

    def finish(self, room):
        room.current_question_index = None

    def reset(self, room):
        _clear_answers(room)
        self.finish(room)


def _existing_answer(question, participant):
    return QuizAnswer.query.filter_by(
        question_id=question.id,
        participant_id=participant.id
    ).first()


def grade_answer(question, selected_answer):
    """Exact, case-sensitive match. Returns (is_correct, points)."""
    is_correct = selected_answer == question.correct_answer
    # No speed bonus: a correct answer is worth the question's points regardless of answer time.
    points = int(question.points or 0) if is_correct else 0
    return is_correct, points


def submit_answer(question, participant, selected_answer, answer_time_ms=None):
    room = question.room
    if participant.room_id != room.id:
        raise ForbiddenError("This participant is not part of the question's room.")
    if not participant.is_active:
        raise ForbiddenError("Inactive participant.")
    if room.status != IN_PROGRESS:
        raise ConflictError("The quiz is not in progress.")
    if not isinstance(selected_answer, str):
        raise ValidationError("selected_answer must be a string.")

    if _existing_answer(question, participant):
        raise ConflictError(ALREADY_ANSWERED)

    is_correct, points = grade_answer(question, selected_answer)

    answer = QuizAnswer(
        question_id=question.id,
        participant_id=participant.id,
        selected_answer=selected_answer,
        is_correct=is_correct,
        answer_time_ms=answer_time_ms,
        points_earned=points,
    )
    db.session.add(answer)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(ALREADY_ANSWERED)

    if points > 0:
        participant.score = Participant.score + points

    _auto_advance(room, question)
    db.session.commit()

    logger.info("Participant %s answered question %s (%s, +%s)",
                participant.id, question.id, "correct" if is_correct else "wrong", points)
    return {
        "id": answer.id,
        "is_correct": is_correct,
        "points_earned": points,
        "correct_answer": question.correct_answer,
    }


def _auto_advance(room, question):
    """Move the room pointer past a question once every active participant has answered it."""
    active = Participant.query.filter_by(room_id=room.id, is_active=True).count()
    answered = QuizAnswer.query.filter_by(question_id=question.id).count()
    if not active or answered < active:
        return

    next_index = question.order_num + 1
    # The last question never finishes the game on its own; the instructor ends it.
    if next_index > count_questions(room.id):
        return
    if (room.current_question_index or 0) < next_index:
        room.current_question_index = next_index


def progress(room, participant):
    """Next unanswered question for one participant, in order."""
    questions = QuizQuestion.query.filter_by(room_id=room.id).order_by(QuizQuestion.order_num).all()
    answered_ids = {
        row[0] for row in db.session.query(QuizAnswer.question_id)
        .filter(QuizAnswer.participant_id == participant.id)
        .filter(QuizAnswer.question_id.in_([q.id for q in questions]))
        .all()
    }

    total = len(questions)
    answered = len(answered_ids)
    completed = answered >= total
    next_question = None
    if not completed:
        next_question = next((q for q in questions if q.id not in answered_ids), None)

    return {
        "total_questions": total,
        "answered_count": answered,
        "completed": completed,
        "score": participant.score,
        "next_question": next_question.to_dict(include_answer=False) if next_question else None,
    }


def room_progress(room):
    """Instructor view: how many active participants have finished every question."""
    total_questions = count_questions(room.id)
    participants = Participant.query.filter_by(room_id=room.id, is_active=True).all()

    completed = 0
    if total_questions:
        counts = dict(
            db.session.query(QuizAnswer.participant_id, db.func.count(QuizAnswer.id))
            .filter(QuizAnswer.question_id.in_(_room_question_ids(room.id)))
            .group_by(QuizAnswer.participant_id)
            .all()
        )
        completed = sum(1 for p in participants if counts.get(p.id, 0) >= total_questions)

    return {
        "total_participants": len(participants),
        "completed_participants": completed,
        "total_questions": total_questions,
    }


def status(room):
    """Polling read model for the quiz screen."""
    current_question = None
    if room.status == IN_PROGRESS and room.current_question_index is not None:
        question = QuizQuestion.query.filter_by(
            room_id=room.id,
            order_num=room.current_question_index
        ).first()
        if question:
            current_question = question.to_dict(include_answer=False)

    return {
        "room": {
            "id": room.id,
            "room_code": room.code,
            "room_name": room.name,
            "status": room.status,
            "game_type": room.game_type,
            "current_question_index": room.current_question_index,
        },
        "total_questions": count_questions(room.id),
        "current_question": current_question,
    }


def question_results(question):
    answers = QuizAnswer.query.filter_by(question_id=question.id)\
        .order_by(QuizAnswer.created_at, QuizAnswer.id).all()

    total = len(answers)
    correct = sum(1 for a in answers if a.is_correct)
    average_time = round(sum(a.answer_time_ms or 0 for a in answers) / total) if total else 0

    return {
        "answers": [
            {
                "id": a.id,
                "selected_answer": a.selected_answer,
                "is_correct": a.is_correct,
                "answer_time_ms": a.answer_time_ms,
                "points_earned": a.points_earned,
                "participant": {"id": a.participant_id, "nickname": a.participant.nickname},
            }
            for a in answers
        ],
        "stats": {
            "total": total,
            "correct": correct,
            "incorrect": total - correct,
            "accuracy": round(correct / total * 100) if total else 0,
            "average_time_ms": average_time,
        },
    }
