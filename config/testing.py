import os

from config import env_list

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shiftdesk_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

IMPORT_MAX_ROWS = int(os.getenv("IMPORT_MAX_ROWS", "20000"))
PROVISION_DENYLIST = env_list("PROVISION_DENYLIST", (r"^system\s",))
TICKET_UNASSIGNED_ATTENDANCE = bool(int(os.getenv("TICKET_UNASSIGNED_ATTENDANCE", "0")))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
