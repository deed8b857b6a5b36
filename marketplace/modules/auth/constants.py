MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72
MAX_FULL_NAME_LENGTH = 255
MAX_EMAIL_LENGTH = 180

ACCOUNT_NOT_ACTIVE_MESSAGE = "Your account is not active. Please contact the administrator."
ACCOUNT_DEACTIVATED_MESSAGE = "Your account has been deactivated."
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials."
EMAIL_TAKEN_MESSAGE = "There is already an account with this email"
PASSWORD_TOO_LONG_MESSAGE = f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes"
