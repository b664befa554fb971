import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of browser origins allowed by CORS and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
    # Response budget for every question placed in a bank (ms)
    QUESTION_DURATION_MS = int(os.environ.get('QUESTION_DURATION_MS', '120000'))
    # Scoring scale: a correct answer is worth up to SCORING_MAX_POINTS,
    # decaying linearly over SCORING_TIME_LIMIT_MS
    SCORING_TIME_LIMIT_MS = int(os.environ.get('SCORING_TIME_LIMIT_MS', '120000'))
    SCORING_MAX_POINTS = int(os.environ.get('SCORING_MAX_POINTS', '120'))
    # Round timeout poll interval (seconds)
    ROUND_TICK_INTERVAL_SEC = float(os.environ.get('ROUND_TICK_INTERVAL_SEC', '1'))
    # Optional: log every timer tick. 0 disables.
    TIMER_TICK_LOGGING = int(os.environ.get('TIMER_TICK_LOGGING', '0'))
