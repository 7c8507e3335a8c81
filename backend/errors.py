"""Typed error raised by the registration and credit services."""

VALIDATION_ERROR = 'VALIDATION_ERROR'
INVALID_CODE = 'INVALID_CODE'
CODE_ALREADY_USED = 'CODE_ALREADY_USED'
FRIDAY_REQUIRES_SPONSOR = 'FRIDAY_REQUIRES_SPONSOR'
SPONSOR_NOT_FOUND = 'SPONSOR_NOT_FOUND'
CANNOT_REDUCE_BELOW_USED = 'CANNOT_REDUCE_BELOW_USED'
NO_ACTIVE_EVENT_YEAR = 'NO_ACTIVE_EVENT_YEAR'
NOT_FOUND = 'NOT_FOUND'
UNKNOWN = 'UNKNOWN'

_STATUS_BY_CODE = {
    VALIDATION_ERROR: 400,
    INVALID_CODE: 404,
    CODE_ALREADY_USED: 409,
    FRIDAY_REQUIRES_SPONSOR: 400,
    SPONSOR_NOT_FOUND: 404,
    CANNOT_REDUCE_BELOW_USED: 400,
    NO_ACTIVE_EVENT_YEAR: 500,
    NOT_FOUND: 404,
    UNKNOWN: 500,
}


class RegistrationError(Exception):
    """Business-rule or lookup failure with a machine-readable code."""

    def __init__(self, message, code=UNKNOWN):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def status_code(self):
        return _STATUS_BY_CODE.get(self.code, 500)

    def to_dict(self):
        return {'error': self.message, 'code': self.code}
