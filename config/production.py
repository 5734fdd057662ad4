import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timexa"),
}

# No default secret: TokenService refuses to start without one.
JWT_CONFIG = {
    "secret": os.getenv("JWT_SECRET", ""),
    "algorithm": os.getenv("JWT_ALGORITHM", "HS256"),
    "expires_minutes": int(os.getenv("JWT_EXPIRES_MINUTES", str(24 * 60))),
}

MAIL_CONFIG = {
    "host": os.getenv("SMTP_HOST", ""),
    "port": int(os.getenv("SMTP_PORT", "587")),
    "username": os.getenv("SMTP_USER", ""),
    "password": os.getenv("SMTP_PASS", ""),
    "from_email": os.getenv("MAIL_FROM", "Timexa Team <no-reply@timexa.app>"),
    "use_tls": bool(int(os.getenv("SMTP_USE_TLS", "1"))),
    "suppress_send": False,
}

DEFAULT_ADMIN = {
    "email": os.getenv("DEFAULT_ADMIN_EMAIL", "admin@admin.com"),
    "password": os.getenv("DEFAULT_ADMIN_PASSWORD", ""),
    "name": os.getenv("DEFAULT_ADMIN_NAME", "Admin"),
}

MAX_SESSION_MINUTES = int(os.getenv("MAX_SESSION_MINUTES", str(24 * 60)))
OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", "3"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
