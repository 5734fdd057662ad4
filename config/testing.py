import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timexa_test"),
}

JWT_CONFIG = {
    "secret": "test-jwt-secret",
    "algorithm": "HS256",
    "expires_minutes": 60,
}

MAIL_CONFIG = {
    "host": "localhost",
    "port": 2525,
    "suppress_send": True,
}

DEFAULT_ADMIN = {
    "email": "admin@admin.com",
    "password": "Admin@123",
    "name": "Admin",
}

MAX_SESSION_MINUTES = 24 * 60
OTP_MAX_ATTEMPTS = 3

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
