"""Names of request parameters, cookies and JSON fields."""

USERNAME_KEY = "username"
EMAIL_ADDRESS_KEY = "email-address"
PASSWORD_KEY = "password"
NEW_PASSWORD_KEY = "new-password"
USER_ID_KEY = "user-id"
USER_IDS_KEY = "user-ids"
USER_ROLE_KEY = "user-role"
SESSION_TOKEN_KEY = "session-token"
ACCESS_TOKEN_KEY = "access-token"
ACCESS_TOKEN_EXPIRY_KEY = "access-token-expiry"
