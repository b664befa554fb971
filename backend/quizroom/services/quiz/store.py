"""Room coordinator: the single authorization boundary over all rooms.

One GameStore is created per process (see ``create_app``) and handed to the
transport. It owns the rooms, the player id factory, the clock and the
scoring scale. Callers must serialize access; the store itself does no
locking.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from quizroom.models import (
    ROOM_IN_PROGRESS, ROOM_WAITING, Answer, Player, RankingItem, Room, Round, RoundOutcome,
)
from . import registry, rounds
from .errors import (
    AlreadyJoined, EmptyBank, HostCannotAnswer, InvalidPayload, InvalidRoomState, NotHost, PlayerNotFound,
    RoundAlreadyActive,
)
from .question_bank import DEFAULT_DURATION_MS, build_question_bank, default_question_bank
from .scoring import MAX_POINTS, TIME_LIMIT_MS, rank_players

logger = logging.getLogger(__name__)

QUESTION_SOURCES = ('manual', 'csv')


def _default_player_id() -> str:
    return f'p_{uuid.uuid4().hex[:8]}'


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class JoinResult:
    room: Room
    player: Player
    became_host: bool


@dataclass(frozen=True)
class BankReplaced:
    question_count: int
    source: str

    def to_dict(self):
        return {'questionCount': self.question_count, 'source': self.source}


class GameStore:
    def __init__(self,
                 id_factory: Callable[[], str] = _default_player_id,
                 clock: Callable[[], int] = _wall_clock_ms,
                 question_duration_ms: int = DEFAULT_DURATION_MS,
                 max_points: int = MAX_POINTS,
                 time_limit_ms: int = TIME_LIMIT_MS):
        self._rooms: Dict[str, Room] = {}
        self._new_player_id = id_factory
        self.clock = clock
        self.question_duration_ms = question_duration_ms
        self.max_points = max_points
        self.time_limit_ms = time_limit_ms

    # ---- Room lookup ----

    def get_or_create_room(self, room_id: str) -> Room:
        if not room_id or not str(room_id).strip():
            raise InvalidPayload('roomId is required')
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id=room_id, question_bank=default_question_bank(self.question_duration_ms))
            self._rooms[room_id] = room
            logger.info(f"[room-create] room={room_id}")
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def _assert_host(self, room: Room, caller: str) -> None:
        if not room.host_connection_id or room.host_connection_id != caller:
            raise NotHost()

    # ---- Player registry ----

    def join(self, room_id: str, username: str, connection_id: str) -> JoinResult:
        # A connection belongs to at most one room
        if any(connection_id in other.connections for other in self._rooms.values()):
            raise AlreadyJoined()
        room = self.get_or_create_room(room_id)
        player, became_host = registry.register_player(room, username, connection_id, self._new_player_id)
        return JoinResult(room=room, player=player, became_host=became_host)

    def remove_connection(self, connection_id: str) -> Optional[Room]:
        """Release a connection from whichever room holds it."""
        for room in self._rooms.values():
            if connection_id in room.connections:
                registry.release_connection(room, connection_id)
                return room
        return None

    # ---- Question bank ----

    def set_question_bank(self, room_id: str, caller: str, source: str,
                          questions: Sequence[Any]) -> BankReplaced:
        room = self.get_or_create_room(room_id)
        # Frozen bank is reported to every caller, host or not
        if room.status != ROOM_WAITING:
            raise InvalidRoomState('Question bank cannot change after the game started')
        self._assert_host(room, caller)
        if source not in QUESTION_SOURCES:
            raise InvalidPayload(f'source must be one of {", ".join(QUESTION_SOURCES)}')

        bank = build_question_bank(questions, self.question_duration_ms)
        room.question_bank = bank
        room.question_source = source
        logger.info(f"[bank-replace] room={room_id} source={source} questions={len(bank)}")
        return BankReplaced(question_count=len(bank), source=source)

    # ---- Game flow ----

    def start_game(self, room_id: str, caller: str) -> Room:
        room = self.get_or_create_room(room_id)
        self._assert_host(room, caller)
        if room.status != ROOM_WAITING:
            raise InvalidRoomState('Game has already started or is finished')
        if not room.question_bank:
            raise EmptyBank()
        room.status = ROOM_IN_PROGRESS
        logger.info(f"[game-start] room={room_id} questions={len(room.question_bank)}")
        return room

    def next_question(self, room_id: str, caller: str, now_ms: Optional[int] = None) -> Round:
        room = self.get_or_create_room(room_id)
        self._assert_host(room, caller)
        if room.status != ROOM_IN_PROGRESS:
            raise InvalidRoomState('Game is not in progress')
        if room.current_round is not None and room.current_round.is_active:
            raise RoundAlreadyActive()
        return rounds.open_round(room, self.clock() if now_ms is None else now_ms)

    def submit_answer(self, room_id: str, caller: str, round_id: str, option_id: str,
                      now_ms: Optional[int] = None) -> Answer:
        room = self.get_or_create_room(room_id)
        player = room.player_for_connection(caller)
        if player is None:
            raise PlayerNotFound()
        if player.is_host:
            raise HostCannotAnswer()
        return rounds.record_answer(
            room, player, round_id, option_id,
            self.clock() if now_ms is None else now_ms,
            max_points=self.max_points,
            time_limit_ms=self.time_limit_ms,
        )

    def should_end(self, room_id: str, now_ms: Optional[int] = None) -> bool:
        room = self.get_or_create_room(room_id)
        return rounds.round_should_end(room, self.clock() if now_ms is None else now_ms)

    def end_round(self, room_id: str) -> RoundOutcome:
        return rounds.close_round(self.get_or_create_room(room_id))

    # ---- Read-only projections ----

    def get_ranking(self, room_id: str) -> List[RankingItem]:
        return rank_players(self.get_or_create_room(room_id).players.values())

    def get_state_snapshot(self, room_id: str) -> Dict[str, Any]:
        room = self.get_or_create_room(room_id)
        host = room.host
        return {
            'roomId': room.room_id,
            'status': room.status,
            'hostPlayerId': host.player_id if host else None,
            'players': [p.to_dict() for p in room.players.values()],
            'currentRoundId': room.current_round.round_id if room.current_round else None,
            'currentQuestionIndex': room.current_question_index,
            'questionCount': len(room.question_bank),
            'questionSource': room.question_source,
        }
