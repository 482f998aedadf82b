import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

ATTENDANCE_WINDOW_MINUTES = float(os.getenv("ATTENDANCE_WINDOW_MINUTES", "15"))
TOKEN_BYTES = int(os.getenv("TOKEN_BYTES", "16"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
TRUSTED_PROXIES = int(os.getenv("TRUSTED_PROXIES", "1"))

DEMO_LESSONS = []
