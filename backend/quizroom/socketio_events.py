from typing import Any, Dict

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from quizroom import socketio
from quizroom.events import (
    ANSWER_ACK, ERROR, HOST_NEXT_QUESTION, HOST_SET_QUESTION_BANK, HOST_START_GAME, NAMESPACE,
    PLAYER_SUBMIT_ANSWER, QUESTION_BANK_ACK, ROOM_JOIN, ROOM_JOIN_ACK, START_GAME_ACK,
    broadcast_question_started, broadcast_state, envelope, room_channel, run_command,
)
from quizroom.scheduler import schedule_round_timer
from quizroom.services.quiz import QuizError
from quizroom.services.quiz.commands import (
    JoinRoom, NextQuestion, RemoveConnection, SetQuestionBank, StartGame, SubmitAnswer,
)
from quizroom.services.quiz.csv_import import parse_question_csv
from quizroom.services.quiz.errors import InvalidPayload


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data: Any) -> Dict[str, Any]:
    """Accept either a bare payload or the versioned envelope."""
    if isinstance(data, dict) and isinstance(data.get('payload'), dict):
        return data['payload']
    return data if isinstance(data, dict) else {}


def _room_id(payload: Dict[str, Any]) -> str:
    return str(payload.get('roomId') or '').strip()


def _reply(event_type: str, payload: Dict[str, Any]) -> None:
    emit(event_type, envelope(event_type, payload))


def _reply_error(event_type: str, error: QuizError) -> None:
    current_app.logger.info(f"[rejected] event={event_type} sid={_get_sid()} code={error.code}")
    _reply(ERROR, dict(error.to_dict(), event=event_type))


def handle_connect(auth=None):
    emit('connected', {'message': f'Connected to {NAMESPACE}'})


def handle_disconnect(reason=None):
    result = run_command(RemoveConnection(connection_id=_get_sid()))
    room = result.value
    if room is None:
        return
    current_app.logger.info(f"[disconnect] room={room.room_id} sid={_get_sid()}")
    broadcast_state(room.room_id)


def handle_room_join(data):
    payload = _payload(data)
    room_id = _room_id(payload)
    result = run_command(JoinRoom(
        room_id=room_id,
        username=str(payload.get('username') or ''),
        connection_id=_get_sid(),
    ))
    if not result.ok:
        _reply_error(ROOM_JOIN, result.error)
        return
    joined = result.value
    join_room(room_channel(room_id))
    broadcast_state(room_id)
    _reply(ROOM_JOIN_ACK, {
        'roomId': room_id,
        'playerId': joined.player.player_id,
        'becameHost': joined.became_host,
    })


def handle_set_question_bank(data):
    payload = _payload(data)
    room_id = _room_id(payload)
    csv_text = payload.get('csv')
    if csv_text is not None:
        source = 'csv'
        try:
            questions = parse_question_csv(str(csv_text))
        except QuizError as exc:
            _reply_error(HOST_SET_QUESTION_BANK, exc)
            return
    else:
        source = payload.get('source') or 'manual'
        questions = payload.get('questions')
        if not isinstance(questions, list):
            _reply_error(HOST_SET_QUESTION_BANK, InvalidPayload('questions must be a list'))
            return

    result = run_command(SetQuestionBank(
        room_id=room_id, caller=_get_sid(), source=source, questions=questions,
    ))
    if not result.ok:
        _reply_error(HOST_SET_QUESTION_BANK, result.error)
        return
    broadcast_state(room_id)
    _reply(QUESTION_BANK_ACK, result.value.to_dict())


def handle_start_game(data):
    room_id = _room_id(_payload(data))
    result = run_command(StartGame(room_id=room_id, caller=_get_sid()))
    if not result.ok:
        _reply_error(HOST_START_GAME, result.error)
        return
    broadcast_state(room_id)
    _reply(START_GAME_ACK, {'roomId': room_id, 'status': result.value.status})


def handle_next_question(data):
    room_id = _room_id(_payload(data))
    result = run_command(NextQuestion(room_id=room_id, caller=_get_sid()))
    if not result.ok:
        _reply_error(HOST_NEXT_QUESTION, result.error)
        return
    rnd = result.value
    broadcast_question_started(room_id, rnd)
    broadcast_state(room_id)
    schedule_round_timer(current_app._get_current_object(), room_id, rnd.round_id)


def handle_submit_answer(data):
    payload = _payload(data)
    room_id = _room_id(payload)
    round_id = str(payload.get('roundId') or '')
    result = run_command(SubmitAnswer(
        room_id=room_id,
        caller=_get_sid(),
        round_id=round_id,
        option_id=str(payload.get('optionId') or ''),
    ))
    if not result.ok:
        _reply_error(PLAYER_SUBMIT_ANSWER, result.error)
        return
    answer = result.value
    _reply(ANSWER_ACK, {
        'roomId': room_id,
        'roundId': round_id,
        'isCorrect': answer.is_correct,
        'awardedScore': answer.awarded_score,
        'responseMs': answer.response_ms,
    })


def handle_leave_room(data):
    room_id = _room_id(_payload(data))
    result = run_command(RemoveConnection(connection_id=_get_sid()))
    leave_room(room_channel(room_id))
    emit('left', {'room': room_channel(room_id)})
    if result.value is not None:
        broadcast_state(result.value.room_id)


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event(ROOM_JOIN, handle_room_join, namespace=NAMESPACE)
    socketio.on_event(HOST_SET_QUESTION_BANK, handle_set_question_bank, namespace=NAMESPACE)
    socketio.on_event(HOST_START_GAME, handle_start_game, namespace=NAMESPACE)
    socketio.on_event(HOST_NEXT_QUESTION, handle_next_question, namespace=NAMESPACE)
    socketio.on_event(PLAYER_SUBMIT_ANSWER, handle_submit_answer, namespace=NAMESPACE)
    socketio.on_event('room.leave', handle_leave_room, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
