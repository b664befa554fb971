from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

ROOM_WAITING = 'waiting'
ROOM_IN_PROGRESS = 'in_progress'
ROOM_FINISHED = 'finished'

ROUND_ACTIVE = 'active'
ROUND_ENDED = 'ended'

OPTION_IDS = ('a', 'b', 'c', 'd')


@dataclass(frozen=True)
class Option:
    option_id: str
    text: str
    index: int

    def to_dict(self):
        return {
            'optionId': self.option_id,
            'text': self.text,
            'index': self.index,
        }


@dataclass(frozen=True)
class Question:
    """Player-visible question. The correct option lives in StoredQuestion."""

    question_id: str
    title: str
    options: Tuple[Option, Option, Option, Option]
    duration_ms: int

    def to_dict(self):
        return {
            'questionId': self.question_id,
            'title': self.title,
            'options': [o.to_dict() for o in self.options],
            'durationMs': self.duration_ms,
        }


@dataclass(frozen=True)
class StoredQuestion:
    question: Question
    correct_option_id: str


@dataclass
class Player:
    player_id: str
    username: str
    connection_id: Optional[str]
    is_host: bool = False
    total_score: int = 0
    total_response_ms: int = 0
    first_correct_at: Optional[int] = None

    @property
    def connected(self) -> bool:
        return self.connection_id is not None

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'username': self.username,
            'isHost': self.is_host,
            'connected': self.connected,
            'totalScore': self.total_score,
        }


@dataclass(frozen=True)
class Answer:
    player_id: str
    option_id: str
    received_at_ms: int
    is_correct: bool
    response_ms: int
    awarded_score: int

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'optionId': self.option_id,
            'receivedAtMs': self.received_at_ms,
            'isCorrect': self.is_correct,
            'responseMs': self.response_ms,
            'awardedScore': self.awarded_score,
        }


@dataclass
class Round:
    round_id: str
    question: Question
    correct_option_id: str
    started_at_ms: int
    ends_at_ms: int
    status: str = ROUND_ACTIVE
    answers: Dict[str, Answer] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status == ROUND_ACTIVE


@dataclass(frozen=True)
class RankingItem:
    player_id: str
    username: str
    total_score: int
    total_response_ms: int
    position: int

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'username': self.username,
            'totalScore': self.total_score,
            'totalResponseMs': self.total_response_ms,
            'position': self.position,
        }


@dataclass(frozen=True)
class RoundOutcome:
    round: Round
    correct_option_id: str
    ranking: List[RankingItem]
    game_ended: bool


@dataclass
class Room:
    room_id: str
    question_bank: List[StoredQuestion]
    question_source: str = 'default'
    status: str = ROOM_WAITING
    host_connection_id: Optional[str] = None
    # Arena of every player who ever joined, keyed by player id
    players: Dict[str, Player] = field(default_factory=dict)
    # connection id -> player id, live connections only
    connections: Dict[str, str] = field(default_factory=dict)
    rounds: List[Round] = field(default_factory=list)
    current_round: Optional[Round] = None
    current_question_index: int = -1

    def player_for_connection(self, connection_id: str) -> Optional[Player]:
        player_id = self.connections.get(connection_id)
        return self.players.get(player_id) if player_id else None

    @property
    def host(self) -> Optional[Player]:
        if not self.host_connection_id:
            return None
        return self.player_for_connection(self.host_connection_id)
