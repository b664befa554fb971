"""Closed set of requests the transport may issue against a GameStore.

Each request is a frozen dataclass; ``dispatch`` routes it to the store and
returns a CommandResult carrying either the value or the QuizError raised.
Unknown command types are programming errors and raise TypeError.
"""

from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Optional, Sequence

from .errors import QuizError
from .store import GameStore


@dataclass(frozen=True)
class GetOrCreateRoom:
    room_id: str


@dataclass(frozen=True)
class JoinRoom:
    room_id: str
    username: str
    connection_id: str


@dataclass(frozen=True)
class RemoveConnection:
    connection_id: str


@dataclass(frozen=True)
class SetQuestionBank:
    room_id: str
    caller: str
    source: str
    questions: Sequence[Any]


@dataclass(frozen=True)
class StartGame:
    room_id: str
    caller: str


@dataclass(frozen=True)
class NextQuestion:
    room_id: str
    caller: str
    now_ms: Optional[int] = None


@dataclass(frozen=True)
class SubmitAnswer:
    room_id: str
    caller: str
    round_id: str
    option_id: str
    now_ms: Optional[int] = None


@dataclass(frozen=True)
class ShouldEnd:
    room_id: str
    now_ms: Optional[int] = None


@dataclass(frozen=True)
class EndRound:
    room_id: str


@dataclass(frozen=True)
class GetStateSnapshot:
    room_id: str


@dataclass(frozen=True)
class GetRanking:
    room_id: str


@dataclass(frozen=True)
class CommandResult:
    value: Any = None
    error: Optional[QuizError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self.value


def dispatch(store: GameStore, command) -> CommandResult:
    try:
        return CommandResult(value=_handle(command, store))
    except QuizError as exc:
        return CommandResult(error=exc)


@singledispatch
def _handle(command, store: GameStore):
    raise TypeError(f'Unknown command: {type(command).__name__}')


@_handle.register
def _(command: GetOrCreateRoom, store: GameStore):
    return store.get_or_create_room(command.room_id)


@_handle.register
def _(command: JoinRoom, store: GameStore):
    return store.join(command.room_id, command.username, command.connection_id)


@_handle.register
def _(command: RemoveConnection, store: GameStore):
    return store.remove_connection(command.connection_id)


@_handle.register
def _(command: SetQuestionBank, store: GameStore):
    return store.set_question_bank(command.room_id, command.caller, command.source, command.questions)


@_handle.register
def _(command: StartGame, store: GameStore):
    return store.start_game(command.room_id, command.caller)


@_handle.register
def _(command: NextQuestion, store: GameStore):
    return store.next_question(command.room_id, command.caller, command.now_ms)


@_handle.register
def _(command: SubmitAnswer, store: GameStore):
    return store.submit_answer(command.room_id, command.caller, command.round_id,
                               command.option_id, command.now_ms)


@_handle.register
def _(command: ShouldEnd, store: GameStore):
    return store.should_end(command.room_id, command.now_ms)


@_handle.register
def _(command: EndRound, store: GameStore):
    return store.end_round(command.room_id)


@_handle.register
def _(command: GetStateSnapshot, store: GameStore):
    return store.get_state_snapshot(command.room_id)


@_handle.register
def _(command: GetRanking, store: GameStore):
    return store.get_ranking(command.room_id)
