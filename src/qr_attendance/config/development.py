import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "memory" runs without MySQL, seeded from DEMO_LESSONS below.
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

ATTENDANCE_WINDOW_MINUTES = float(os.getenv("ATTENDANCE_WINDOW_MINUTES", "15"))
TOKEN_BYTES = int(os.getenv("TOKEN_BYTES", "16"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Number of reverse proxies whose X-Forwarded-For header is trusted.
TRUSTED_PROXIES = int(os.getenv("TRUSTED_PROXIES", "0"))

DEMO_LESSONS = [
    {
        "lesson_id": "L1",
        "class_id": "C1",
        "teacher_id": "T1",
        "title": "Demo lesson",
        "students": ["S1", "S2"],
    },
]
