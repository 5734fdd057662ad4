"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MAX_SESSION_MINUTES = 24 * 60

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

DEFAULT_OTP_LENGTH = 4
MIN_OTP_LENGTH = 4
MAX_OTP_LENGTH = 10
DEFAULT_OTP_MAX_ATTEMPTS = 3
DEFAULT_OTP_EXPIRY_MINUTES = 5

MIN_PASSWORD_LENGTH = 6

DEFAULT_JWT_EXPIRES_MINUTES = 24 * 60
