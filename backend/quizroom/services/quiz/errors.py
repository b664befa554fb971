"""Error kinds raised by the quiz core.

Every failure is local to the operation that raised it and leaves room state
untouched. The transport turns them into caller-only error messages.
"""

from typing import Any, Dict, Optional


class QuizError(Exception):
    code = 'QUIZ_ERROR'
    message = 'Quiz operation failed'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {'code': self.code, 'message': str(self)}


class NotHost(QuizError):
    code = 'NOT_ROOM_HOST'
    message = 'Only the room host may do this'


class InvalidRoomState(QuizError):
    code = 'INVALID_ROOM_STATE'
    message = 'Room is not in the right state for this action'


class RoundAlreadyActive(QuizError):
    code = 'ROUND_ALREADY_ACTIVE'
    message = 'A round is already active'


class NoMoreQuestions(QuizError):
    code = 'NO_MORE_QUESTIONS'
    message = 'The question bank is exhausted'


class EmptyBank(QuizError):
    code = 'QUESTION_BANK_EMPTY'
    message = 'The question bank is empty'


class InvalidQuestion(QuizError):
    code = 'INVALID_QUESTION'

    def __init__(self, index: int, field: str, message: Optional[str] = None):
        self.index = index
        self.field = field
        super().__init__(message or f'Question {index}: invalid {field}')

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['index'] = self.index
        data['field'] = self.field
        return data


class UsernameTaken(QuizError):
    code = 'USERNAME_ALREADY_IN_USE'
    message = 'Username already in use in this room'


class AlreadyJoined(QuizError):
    code = 'ALREADY_IN_ROOM'
    message = 'This connection already joined a room'


class PlayerNotFound(QuizError):
    code = 'PLAYER_NOT_IN_ROOM'
    message = 'You are not a player in this room'


class HostCannotAnswer(QuizError):
    code = 'HOST_CANNOT_ANSWER'
    message = 'The host cannot answer questions'


class RoundNotFound(QuizError):
    code = 'ROUND_NOT_FOUND'
    message = 'No such round'


class RoundNotActive(QuizError):
    code = 'ROUND_NOT_ACTIVE'
    message = 'The round has already ended'


class AlreadyAnswered(QuizError):
    code = 'ALREADY_ANSWERED'
    message = 'Already answered this round'


class AnswerTooLate(QuizError):
    code = 'ANSWER_OUT_OF_TIME'
    message = 'The answer arrived after the round closed'


class InvalidPayload(QuizError):
    code = 'INVALID_PAYLOAD'
    message = 'Malformed request'
