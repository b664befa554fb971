from flask import Blueprint, current_app, jsonify, request

from quizroom.events import get_store, run_command
from quizroom.services.quiz import QuizError
from quizroom.services.quiz.commands import GetRanking, GetStateSnapshot
from quizroom.services.quiz.csv_import import parse_question_csv
from quizroom.services.quiz.question_bank import build_question_bank

rooms = Blueprint('rooms', __name__)


def _error_response(error: QuizError, status: int = 400):
    body = error.to_dict()
    body['error'] = body.pop('message')
    return jsonify(body), status


def _room_missing(room_id: str) -> bool:
    return get_store().get_room(room_id) is None


@rooms.route('/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    if _room_missing(room_id):
        return jsonify({'error': 'Room not found'}), 404
    snapshot = run_command(GetStateSnapshot(room_id=room_id)).unwrap()
    # Include the response budget so clients can show countdowns
    snapshot['durations'] = {'questionMs': current_app.config.get('QUESTION_DURATION_MS', 120000)}
    return jsonify(snapshot)


@rooms.route('/<string:room_id>/ranking', methods=['GET'])
def get_room_ranking(room_id):
    if _room_missing(room_id):
        return jsonify({'error': 'Room not found'}), 404
    ranking = run_command(GetRanking(room_id=room_id)).unwrap()
    return jsonify({'roomId': room_id, 'ranking': [item.to_dict() for item in ranking]})


@rooms.route('/questions/parse', methods=['POST'])
def parse_questions():
    """Preview a CSV question bank without touching any room."""
    data = request.get_json(silent=True) or {}
    csv_text = data.get('csv')
    if not isinstance(csv_text, str):
        return jsonify({'error': 'csv text is required', 'code': 'INVALID_PAYLOAD'}), 400
    try:
        questions = parse_question_csv(csv_text)
        build_question_bank(questions, current_app.config.get('QUESTION_DURATION_MS', 120000))
    except QuizError as exc:
        return _error_response(exc)
    return jsonify({'questionCount': len(questions), 'questions': questions})
