"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention and are the
bridge between domain failures and OAuth2 error responses: the presentation
layer maps every code to exactly one OAuth2 ``error`` value.

Categories:
- Validation errors (INVALID_*, *_REQUIRED)
- Resource errors (*_NOT_FOUND)
- Conflict errors (*_ALREADY_*, CONCURRENCY_CONFLICT)
- Authentication errors (INVALID_CREDENTIALS, CLIENT_AUTHENTICATION_FAILED)
- Grant errors (CODE_*, TOKEN_*, PKCE_*)
- Authorization errors (PERMISSION_DENIED)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable).

    Error codes follow ENTITY_ACTION_REASON naming convention.
    """

    # Validation errors
    INVALID_EMAIL = "invalid_email"
    PASSWORD_TOO_WEAK = "password_too_weak"
    PASSWORD_UNCHANGED = "password_unchanged"
    INVALID_REDIRECT_URI = "invalid_redirect_uri"
    INVALID_GRANT_TYPES = "invalid_grant_types"
    PKCE_REQUIRED = "pkce_required"
    INVALID_CODE_CHALLENGE = "invalid_code_challenge"
    INVALID_SCOPE = "invalid_scope"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    VALIDATION_FAILED = "validation_failed"

    # Resource errors
    USER_NOT_FOUND = "user_not_found"
    CLIENT_NOT_FOUND = "client_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    TOKEN_NOT_FOUND = "token_not_found"
    AUTHORIZATION_REQUEST_NOT_FOUND = "authorization_request_not_found"

    # Conflict errors
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    IDENTITY_ALREADY_LINKED = "identity_already_linked"
    CONCURRENCY_CONFLICT = "concurrency_conflict"

    # Authentication errors
    INVALID_CREDENTIALS = "invalid_credentials"
    CLIENT_AUTHENTICATION_FAILED = "client_authentication_failed"
    EXTERNAL_ASSERTION_INVALID = "external_assertion_invalid"
    USER_INACTIVE = "user_inactive"
    CLIENT_INACTIVE = "client_inactive"

    # Grant errors
    CODE_EXPIRED = "code_expired"
    CODE_ALREADY_REDEEMED = "code_already_redeemed"
    CODE_REVOKED = "code_revoked"
    REDIRECT_URI_MISMATCH = "redirect_uri_mismatch"
    PKCE_VERIFICATION_FAILED = "pkce_verification_failed"
    CODE_CLIENT_MISMATCH = "code_client_mismatch"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_REVOKED = "token_revoked"
    TOKEN_INVALID = "token_invalid"
    REFRESH_TOKEN_REUSED = "refresh_token_reused"
    SESSION_REVOKED = "session_revoked"

    # Authorization errors
    PERMISSION_DENIED = "permission_denied"
