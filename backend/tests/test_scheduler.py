import pytest

from quizroom import socketio
from quizroom.scheduler import schedule_round_timer, tick_round

from conftest import event_payloads, join

ROUND_END_SEQUENCE = ['question.ended', 'answer.reveal', 'leaderboard.updated', 'room.state_updated']


@pytest.fixture()
def live_round(flask_app, sio_factory, questions):
    """Host plus one player in room ABCD with round r_1 running."""
    def _start(bank=None):
        host = sio_factory()
        player = sio_factory()
        join(host, 'ABCD', 'host')
        join(player, 'ABCD', 'ana')
        if bank is not None:
            host.emit('host.set_question_bank', {'roomId': 'ABCD', 'source': 'manual', 'questions': bank},
                      namespace='/ws')
        host.emit('host.start_game', {'roomId': 'ABCD'}, namespace='/ws')
        host.emit('host.next_question', {'roomId': 'ABCD'}, namespace='/ws')
        host.get_received('/ws')
        player.get_received('/ws')
        return host, player
    return _start


def _names(received):
    return [pkt['name'] for pkt in received]


def test_tick_reports_remaining_time_while_round_runs(flask_app, clock, live_round):
    host, player = live_round()
    clock.advance(1000)

    assert tick_round(flask_app, 'ABCD', 'r_1') is True

    received = player.get_received('/ws')
    assert event_payloads(received, 'question.timer_tick') == [
        {'roomId': 'ABCD', 'roundId': 'r_1', 'remainingMs': 119000}
    ]
    assert 'question.ended' not in _names(received)


def test_tick_ends_round_once_everyone_answered(flask_app, live_round):
    host, player = live_round()
    player.emit('player.submit_answer', {'roomId': 'ABCD', 'roundId': 'r_1', 'optionId': 'b'}, namespace='/ws')
    player.get_received('/ws')

    assert tick_round(flask_app, 'ABCD', 'r_1') is False

    received = host.get_received('/ws')
    names = [n for n in _names(received) if n in ROUND_END_SEQUENCE + ['game.ended']]
    # Default bank has one question, so the game ends too
    assert names == ROUND_END_SEQUENCE + ['game.ended']
    assert event_payloads(received, 'question.ended')[0]['correctOptionId'] == 'b'
    assert event_payloads(received, 'answer.reveal')[0]['correctOptionId'] == 'b'
    ranking = event_payloads(received, 'leaderboard.updated')[0]['ranking']
    assert ranking[0]['username'] == 'ana'
    assert ranking[0]['totalScore'] == 120
    assert event_payloads(received, 'room.state_updated')[-1]['status'] == 'finished'
    assert event_payloads(received, 'game.ended')[0]['ranking'] == ranking


def test_tick_ends_round_on_timeout(flask_app, clock, live_round, questions):
    host, player = live_round(bank=questions)
    clock.advance(120000)

    assert tick_round(flask_app, 'ABCD', 'r_1') is False

    received = player.get_received('/ws')
    assert event_payloads(received, 'question.timer_tick')[0]['remainingMs'] == 0
    assert 'question.ended' in _names(received)
    assert 'game.ended' not in _names(received)
    assert event_payloads(received, 'room.state_updated')[-1]['status'] == 'in_progress'

    # Host may now open the next round
    host.emit('host.next_question', {'roomId': 'ABCD'}, namespace='/ws')
    assert event_payloads(host.get_received('/ws'), 'question.started')[0]['roundId'] == 'r_2'


def test_tick_on_ended_round_is_a_noop(flask_app, live_round):
    host, player = live_round()
    player.emit('player.submit_answer', {'roomId': 'ABCD', 'roundId': 'r_1', 'optionId': 'a'}, namespace='/ws')
    assert tick_round(flask_app, 'ABCD', 'r_1') is False
    player.get_received('/ws')

    assert tick_round(flask_app, 'ABCD', 'r_1') is False
    assert tick_round(flask_app, 'ABCD', 'r_7') is False
    assert tick_round(flask_app, 'NOPE', 'r_1') is False
    assert player.get_received('/ws') == []


def test_schedule_is_noop_under_testing(flask_app, monkeypatch):
    started = []
    monkeypatch.setattr(socketio, 'start_background_task', lambda *a, **kw: started.append(a))
    schedule_round_timer(flask_app, 'ABCD', 'r_1')
    assert started == []


def test_schedule_runs_one_timer_per_round(flask_app, monkeypatch):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    started = []
    monkeypatch.setattr(socketio, 'start_background_task', lambda *a, **kw: started.append(a))

    schedule_round_timer(flask_app, 'ABCD', 'r_1')
    schedule_round_timer(flask_app, 'ABCD', 'r_1')
    schedule_round_timer(flask_app, 'ABCD', 'r_2')

    assert [args[2:4] for args in started] == [('ABCD', 'r_1'), ('ABCD', 'r_2')]
    assert flask_app.extensions['quizroom']['timers'] == {('ABCD', 'r_1'), ('ABCD', 'r_2')}
