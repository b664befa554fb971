import math
import sys
from typing import Iterable, List

from quizroom.models import Player, RankingItem

MAX_POINTS = 120
TIME_LIMIT_MS = 120000

_NEVER_CORRECT = sys.maxsize


def _round_half_up(value: float) -> int:
    # Half-up, unlike round()
    return int(math.floor(value + 0.5))


def score_correct_answer(ends_at_ms: int, now_ms: int,
                         max_points: int = MAX_POINTS,
                         time_limit_ms: int = TIME_LIMIT_MS) -> int:
    """Points for a correct answer received at now_ms.

    Decays linearly with the time left before ends_at_ms, never below 1.
    """
    remaining_ms = max(0, ends_at_ms - now_ms)
    raw = _round_half_up(max_points * (remaining_ms / time_limit_ms))
    return max(1, raw)


def _ranking_key(player: Player):
    first_correct = player.first_correct_at if player.first_correct_at is not None else _NEVER_CORRECT
    return (-player.total_score, player.total_response_ms, first_correct, player.username)


def rank_players(players: Iterable[Player]) -> List[RankingItem]:
    """Total order: score desc, response time asc, first correct asc, username asc."""
    ordered = sorted(players, key=_ranking_key)
    return [
        RankingItem(
            player_id=p.player_id,
            username=p.username,
            total_score=p.total_score,
            total_response_ms=p.total_response_ms,
            position=idx + 1,
        )
        for idx, p in enumerate(ordered)
    ]
