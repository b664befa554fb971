"""Socket.IO event names, the message envelope and room broadcast helpers."""

from datetime import datetime, timezone
from typing import Any, Dict

from flask import current_app

from quizroom import socketio
from quizroom.models import Round, RoundOutcome
from quizroom.services.quiz import CommandResult, GameStore, dispatch
from quizroom.services.quiz.commands import GetStateSnapshot

NAMESPACE = '/ws'
ENVELOPE_VERSION = 1

# Client -> server
ROOM_JOIN = 'room.join'
HOST_SET_QUESTION_BANK = 'host.set_question_bank'
HOST_START_GAME = 'host.start_game'
HOST_NEXT_QUESTION = 'host.next_question'
PLAYER_SUBMIT_ANSWER = 'player.submit_answer'

# Server -> room
ROOM_STATE_UPDATED = 'room.state_updated'
QUESTION_STARTED = 'question.started'
QUESTION_TIMER_TICK = 'question.timer_tick'
QUESTION_ENDED = 'question.ended'
ANSWER_REVEAL = 'answer.reveal'
LEADERBOARD_UPDATED = 'leaderboard.updated'
GAME_ENDED = 'game.ended'

# Server -> caller only
ROOM_JOIN_ACK = 'room.join_ack'
QUESTION_BANK_ACK = 'host.question_bank_ack'
START_GAME_ACK = 'host.start_game_ack'
ANSWER_ACK = 'player.answer_ack'
ERROR = 'error'


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def iso_from_ms(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc).isoformat()


def envelope(event_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'v': ENVELOPE_VERSION,
        'type': event_type,
        'emittedAt': iso_now(),
        'payload': payload,
    }


def room_channel(room_id: str) -> str:
    return f"room:{room_id}"


def get_store(app=None) -> GameStore:
    app = app or current_app
    return app.extensions['quizroom']['store']


def run_command(command, app=None) -> CommandResult:
    """Dispatch a command while holding the process-wide store lock."""
    app = app or current_app
    ext = app.extensions['quizroom']
    with ext['lock']:
        return dispatch(ext['store'], command)


def emit_to_room(room_id: str, event_type: str, payload: Dict[str, Any]) -> None:
    # socketio.emit (not flask_socketio.emit) so this also works from background tasks
    socketio.emit(event_type, envelope(event_type, payload), to=room_channel(room_id), namespace=NAMESPACE)


def broadcast_state(room_id: str, app=None) -> None:
    snapshot = run_command(GetStateSnapshot(room_id=room_id), app).unwrap()
    emit_to_room(room_id, ROOM_STATE_UPDATED, snapshot)


def broadcast_question_started(room_id: str, rnd: Round) -> None:
    emit_to_room(room_id, QUESTION_STARTED, {
        'roomId': room_id,
        'roundId': rnd.round_id,
        'question': rnd.question.to_dict(),
        'startedAt': iso_from_ms(rnd.started_at_ms),
        'endsAt': iso_from_ms(rnd.ends_at_ms),
    })


def broadcast_round_ended(room_id: str, outcome: RoundOutcome, app=None) -> None:
    round_id = outcome.round.round_id
    ranking = [item.to_dict() for item in outcome.ranking]
    emit_to_room(room_id, QUESTION_ENDED, {
        'roomId': room_id,
        'roundId': round_id,
        'endedAt': iso_now(),
        'correctOptionId': outcome.correct_option_id,
    })
    emit_to_room(room_id, ANSWER_REVEAL, {
        'roomId': room_id,
        'roundId': round_id,
        'correctOptionId': outcome.correct_option_id,
    })
    emit_to_room(room_id, LEADERBOARD_UPDATED, {
        'roomId': room_id,
        'roundId': round_id,
        'ranking': ranking,
    })
    broadcast_state(room_id, app)
    if outcome.game_ended:
        emit_to_room(room_id, GAME_ENDED, {'roomId': room_id, 'ranking': ranking})
