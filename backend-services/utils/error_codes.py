"""
Centralized Error Code Registry

Single source of truth for the error codes returned in error bodies.

Usage:
    from utils.error_codes import ErrorCode
    from utils.error_util import AppError

    raise AppError(404, 'No secret found with that ID', ErrorCode.SCR_NOT_FOUND)
"""


class ErrorCode:
    """
    Centralized error code constants.

    Naming Convention:
        - Format: CATEGORY_DESCRIPTION = 'PREFIX###'
        - Categories: SCR (secrets), GEN (general), ISE (internal)
    """

    # ========================================================================
    # Secret Errors (SCR001-SCR999)
    # ========================================================================
    SCR_CONTENT_REQUIRED = 'SCR001'  # Missing or blank content on create
    SCR_INVALID_SEEN_IDS = 'SCR002'  # Malformed id in seenSecrets
    SCR_INVALID_LIMIT = 'SCR003'  # limit is not a positive integer
    SCR_INVALID_ID = 'SCR004'  # Malformed id in path
    SCR_NOT_FOUND = 'SCR005'  # No visible secret with that id
    SCR_KEY_REQUIRED = 'SCR006'  # Missing key on delete
    SCR_KEY_NOT_FOUND = 'SCR007'  # Wrong key or already deleted

    # ========================================================================
    # General/System Errors (GEN001-GEN999, ISE001-ISE999)
    # ========================================================================
    GEN_INVALID_REQUEST = 'GEN001'  # Body is not valid JSON
    GEN_VALIDATION_ERROR = 'GEN002'  # Request record failed validation
    GEN_NOT_FOUND = 'GEN404'  # Unknown route
    GEN_METHOD_NOT_ALLOWED = 'GEN405'  # Route exists, method does not
    ISE_INTERNAL_ERROR = 'ISE001'  # Internal server error
    ISE_DATABASE_UNAVAILABLE = 'ISE002'  # Health ping failed


class ErrorKind:
    INVALID_INPUT = 'InvalidInput'
    NOT_FOUND = 'NotFound'
    UNHANDLED = 'Unhandled'
