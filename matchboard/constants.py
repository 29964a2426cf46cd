"""Global constants for the matchboard application."""

# Store paths
MATCHES_PATH = "matches"
RESET_MARKER_PATH = "lastResetDate"
ROOT_PATH = "/"

# Roster keys on a match document
TEAM1 = "team1"
TEAM2 = "team2"
TEAM_KEYS = (TEAM1, TEAM2)
TEAM_LABELS = {TEAM1: "Команда 1", TEAM2: "Команда 2"}

# Matches written by every daily reset, in display order
DEFAULT_SCHEDULE = {
    "match1": "NTPA-13:00",
    "match2": "VTPA-15:00",
    "match3": "VTPa-19:00",
}

# Session states
STATUS_LOADING = "loading"
STATUS_READY = "ready"

# Timing
COUNTDOWN_INTERVAL = 60
WRITE_TIMEOUT = 10
PLAYER_ID_LENGTH = 9
NOTIFICATION_LIMIT = 20

# Notification categories (Flask flash categories)
CATEGORY_SUCCESS = "success"
CATEGORY_ERROR = "danger"

# User-facing messages
MSG_NAME_REQUIRED = "Введите ФИО"
MSG_PHONE_REQUIRED = "Введите номер телефона"
MSG_TEAM_REQUIRED = "Выберите команду"
MSG_MATCH_NOT_FOUND = "Матч не найден"
MSG_RESET_SUCCESS = "Данные сброшены для нового дня!"
MSG_RESET_FAILED = "Ошибка сброса данных"
MSG_LOAD_FAILED = "Ошибка загрузки данных"
MSG_JOIN_SUCCESS = "Вы успешно записаны!"
MSG_JOIN_FAILED = "Ошибка записи"
MSG_LEAVE_SUCCESS = "Запись удалена!"
MSG_LEAVE_FAILED = "Ошибка удаления"
