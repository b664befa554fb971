"""Scripted game used by the ``flask quiz-sim`` command.

Runs against a private GameStore with a simulated clock, so it finishes
instantly and never touches the live rooms.
"""

import itertools
from typing import Iterator

from quizroom.services.quiz import GameStore, dispatch
from quizroom.services.quiz.commands import (
    EndRound, GetRanking, JoinRoom, NextQuestion, ShouldEnd, StartGame, SubmitAnswer,
)


class SimulatedClock:
    def __init__(self, start_ms: int = 0):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


def _describe(label, result):
    if result.ok:
        return f"[{label}] ok {result.value!r}"
    return f"[{label}] error {result.error.code}"


def run_simulation(config, room_id: str = 'room_debug') -> Iterator[str]:
    clock = SimulatedClock(start_ms=1_000_000)
    counter = itertools.count(1)
    store = GameStore(
        id_factory=lambda: f'p_sim{next(counter)}',
        clock=clock,
        question_duration_ms=config.get('QUESTION_DURATION_MS', 120000),
        max_points=config.get('SCORING_MAX_POINTS', 120),
        time_limit_ms=config.get('SCORING_TIME_LIMIT_MS', 120000),
    )
    connections = {'host': 'sid-host', 'ana': 'sid-ana', 'joao': 'sid-joao'}

    for username, sid in connections.items():
        result = dispatch(store, JoinRoom(room_id=room_id, username=username, connection_id=sid))
        yield _describe(f'{username} join', result)

    yield _describe('host start', dispatch(store, StartGame(room_id=room_id, caller=connections['host'])))
    result = dispatch(store, NextQuestion(room_id=room_id, caller=connections['host']))
    yield _describe('host next', result)
    if not result.ok:
        return
    round_id = result.value.round_id

    # The default question's correct option is "b"
    clock.advance(1100)
    yield _describe('ana answer', dispatch(store, SubmitAnswer(
        room_id=room_id, caller=connections['ana'], round_id=round_id, option_id='b')))
    clock.advance(2000)
    yield _describe('joao answer', dispatch(store, SubmitAnswer(
        room_id=room_id, caller=connections['joao'], round_id=round_id, option_id='a')))

    if dispatch(store, ShouldEnd(room_id=room_id)).value:
        ended = dispatch(store, EndRound(room_id=room_id)).unwrap()
        yield f"[round end] correct={ended.correct_option_id} game_ended={ended.game_ended}"

    for item in dispatch(store, GetRanking(room_id=room_id)).unwrap():
        yield f"[ranking] #{item.position} {item.username} score={item.total_score} ms={item.total_response_ms}"
