from typing import Tuple

from quizroom import socketio
from quizroom.events import (
    QUESTION_TIMER_TICK, broadcast_round_ended, emit_to_room, run_command,
)
from quizroom.services.quiz.commands import EndRound, ShouldEnd


def _timer_key(room_id: str, round_id: str) -> Tuple[str, str]:
    return (room_id, round_id)


def schedule_round_timer(app, room_id: str, round_id: str) -> None:
    """Poll the round every tick until it should end, then end it.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single timer per (room_id, round_id)
    - Emits a timer tick to the room on every poll
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    ext = app.extensions['quizroom']
    key = _timer_key(room_id, round_id)
    with ext['lock']:
        if key in ext['timers']:
            app.logger.info(f"[timer-skip] room={room_id} round={round_id} already scheduled")
            return
        ext['timers'].add(key)

    interval = float(app.config.get('ROUND_TICK_INTERVAL_SEC', 1))
    app.logger.info(f"[timer-set] room={room_id} round={round_id} interval={interval}s")
    socketio.start_background_task(_worker, app, room_id, round_id, interval)


def _worker(app, room_id: str, round_id: str, interval: float) -> None:
    ext = app.extensions['quizroom']
    try:
        while True:
            socketio.sleep(interval)
            if not tick_round(app, room_id, round_id):
                return
    finally:
        with ext['lock']:
            ext['timers'].discard(_timer_key(room_id, round_id))


def tick_round(app, room_id: str, round_id: str) -> bool:
    """Run one poll for a round. Returns True while the timer should keep going."""
    ext = app.extensions['quizroom']
    store = ext['store']
    with app.app_context():
        outcome = None
        with ext['lock']:
            room = store.get_room(room_id)
            rnd = room.current_round if room else None
            # The round may have been ended or superseded since the last tick
            if rnd is None or rnd.round_id != round_id or not rnd.is_active:
                app.logger.info(f"[timer-abort] room={room_id} round={round_id} no longer active")
                return False
            remaining_ms = max(0, rnd.ends_at_ms - store.clock())
            if run_command(ShouldEnd(room_id=room_id), app).unwrap():
                outcome = run_command(EndRound(room_id=room_id), app).unwrap()

        emit_to_room(room_id, QUESTION_TIMER_TICK, {
            'roomId': room_id,
            'roundId': round_id,
            'remainingMs': remaining_ms,
        })
        if app.config.get('TIMER_TICK_LOGGING'):
            app.logger.info(f"[timer-tick] room={room_id} round={round_id} remaining={remaining_ms}ms")

        if outcome is None:
            return True

        app.logger.info(
            f"[timer-fire] room={room_id} round={round_id} game_ended={outcome.game_ended}"
        )
        broadcast_round_ended(room_id, outcome, app)
        return False
