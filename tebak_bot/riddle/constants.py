# tebak_bot/riddle/constants.py

BASE_POINTS = 10
STREAK_BONUS = 2

HISTORY_LIMIT = 50

ANALYSIS_EVERY = 5
ANALYSIS_WINDOW = 20

STATUS_CORRECT = "CORRECT"
STATUS_CLOSE = "CLOSE"
STATUS_WRONG = "WRONG"

RESULT_DELAY_SECONDS = 2.0
