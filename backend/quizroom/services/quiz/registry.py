"""Player registry: join and connection release for a single room."""

import logging
from typing import Callable, Optional

from quizroom.models import Player, Room
from .errors import AlreadyJoined, InvalidPayload, UsernameTaken

logger = logging.getLogger(__name__)


def register_player(room: Room, username: str, connection_id: str,
                    new_player_id: Callable[[], str]):
    """Add a player to the room. Returns (player, became_host)."""
    name = (username or '').strip()
    if not name:
        raise InvalidPayload('username is required')
    if connection_id in room.connections:
        raise AlreadyJoined()

    lowered = name.lower()
    if any(p.username.lower() == lowered for p in room.players.values()):
        raise UsernameTaken()

    player_id = new_player_id()
    while player_id in room.players:
        player_id = new_player_id()

    player = Player(player_id=player_id, username=name, connection_id=connection_id)
    room.players[player_id] = player
    room.connections[connection_id] = player_id

    became_host = not room.host_connection_id
    if became_host:
        room.host_connection_id = connection_id
        player.is_host = True

    logger.info(f"[room-join] room={room.room_id} player={player_id} host={became_host}")
    return player, became_host


def _pick_successor(room: Room) -> Optional[str]:
    """Next host connection, preferring players with no answer in the active round."""
    rnd = room.current_round
    answered = rnd.answers if rnd is not None and rnd.is_active else {}
    for conn, player_id in room.connections.items():
        if player_id not in answered:
            return conn
    return next(iter(room.connections), None)


def release_connection(room: Room, connection_id: str) -> Optional[Player]:
    """Drop a connection mapping; the player record stays for ranking.

    When the host leaves, the role moves to the earliest remaining connection
    that has not answered the active round. An empty room is left without a host.
    """
    player_id = room.connections.pop(connection_id, None)
    if player_id is None:
        return None
    player = room.players[player_id]
    player.connection_id = None

    if room.host_connection_id == connection_id:
        player.is_host = False
        successor_conn = _pick_successor(room)
        room.host_connection_id = successor_conn
        if successor_conn is not None:
            room.players[room.connections[successor_conn]].is_host = True
        logger.info(
            f"[host-failover] room={room.room_id} from={player_id} "
            f"to={room.connections.get(successor_conn) if successor_conn else None}"
        )
    return player
