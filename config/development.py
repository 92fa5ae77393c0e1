import os

from config import env_list

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shiftdesk"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Import limits and behaviour
IMPORT_MAX_ROWS = int(os.getenv("IMPORT_MAX_ROWS", "20000"))
PROVISION_DENYLIST = env_list("PROVISION_DENYLIST", (r"^system\s",))
TICKET_UNASSIGNED_ATTENDANCE = bool(int(os.getenv("TICKET_UNASSIGNED_ATTENDANCE", "0")))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
