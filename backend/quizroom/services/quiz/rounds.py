"""Round engine: opening rounds, taking answers and closing them.

Host and room-status checks belong to the store; these helpers only guard
round-level rules.
"""

import logging

from quizroom.models import (
    ROOM_FINISHED, ROUND_ENDED, Answer, Player, Room, Round, RoundOutcome,
)
from .errors import (
    AlreadyAnswered, AnswerTooLate, NoMoreQuestions, RoundNotActive, RoundNotFound,
)
from .scoring import MAX_POINTS, TIME_LIMIT_MS, rank_players, score_correct_answer

logger = logging.getLogger(__name__)


def open_round(room: Room, now_ms: int) -> Round:
    next_index = room.current_question_index + 1
    if next_index >= len(room.question_bank):
        raise NoMoreQuestions()

    stored = room.question_bank[next_index]
    rnd = Round(
        round_id=f'r_{next_index + 1}',
        question=stored.question,
        correct_option_id=stored.correct_option_id,
        started_at_ms=now_ms,
        ends_at_ms=now_ms + stored.question.duration_ms,
    )
    room.current_question_index = next_index
    room.current_round = rnd
    room.rounds.append(rnd)
    logger.info(f"[round-start] room={room.room_id} round={rnd.round_id} ends_at={rnd.ends_at_ms}")
    return rnd


def record_answer(room: Room, player: Player, round_id: str, option_id: str, now_ms: int,
                  max_points: int = MAX_POINTS, time_limit_ms: int = TIME_LIMIT_MS) -> Answer:
    rnd = room.current_round
    if rnd is None or rnd.round_id != round_id:
        raise RoundNotFound()
    if not rnd.is_active:
        raise RoundNotActive()
    if player.player_id in rnd.answers:
        raise AlreadyAnswered()
    if now_ms > rnd.ends_at_ms:
        raise AnswerTooLate()

    is_correct = option_id == rnd.correct_option_id
    response_ms = now_ms - rnd.started_at_ms
    awarded = 0
    if is_correct:
        awarded = score_correct_answer(rnd.ends_at_ms, now_ms, max_points, time_limit_ms)
        player.total_score += awarded
        player.total_response_ms += response_ms
        if player.first_correct_at is None:
            player.first_correct_at = now_ms

    answer = Answer(
        player_id=player.player_id,
        option_id=option_id,
        received_at_ms=now_ms,
        is_correct=is_correct,
        response_ms=response_ms,
        awarded_score=awarded,
    )
    rnd.answers[player.player_id] = answer
    return answer


def round_should_end(room: Room, now_ms: int) -> bool:
    rnd = room.current_round
    if rnd is None or not rnd.is_active:
        return True

    answering = [
        p for p in room.players.values()
        if not p.is_host and p.connected
    ]
    if not answering:
        return True
    if all(p.player_id in rnd.answers for p in answering):
        return True
    return now_ms >= rnd.ends_at_ms


def close_round(room: Room) -> RoundOutcome:
    rnd = room.current_round
    if rnd is None:
        raise RoundNotFound()

    if rnd.is_active:
        rnd.status = ROUND_ENDED
        logger.info(f"[round-end] room={room.room_id} round={rnd.round_id} answers={len(rnd.answers)}")

    game_ended = room.current_question_index >= len(room.question_bank) - 1
    if game_ended and room.status != ROOM_FINISHED:
        room.status = ROOM_FINISHED
        logger.info(f"[finish] room={room.room_id} finished at round={rnd.round_id}")

    return RoundOutcome(
        round=rnd,
        correct_option_id=rnd.correct_option_id,
        ranking=rank_players(room.players.values()),
        game_ended=game_ended,
    )
