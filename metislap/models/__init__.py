from .instructor import Instructor
from .room import Room
from .participant import Participant
from .quiz_question import QuizQuestion
from .quiz_answer import QuizAnswer
from .drawing_word import DrawingWord
from .drawing_round import DrawingRound
from .drawing_guess import DrawingGuess
from .ladder_item import LadderItem
from .ladder_data import LadderData
from .ladder_selection import LadderSelection
from .log_entry import LogEntry

__all__ = [
	"Instructor",
	"Room",
	"Participant",
	"QuizQuestion",
	"QuizAnswer",
	"DrawingWord",
	"DrawingRound",
	"DrawingGuess",
	"LadderItem",
	"LadderData",
	"LadderSelection",
	"LogEntry",
]
