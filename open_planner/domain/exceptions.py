"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed or out of range"""

    pass


class NotFoundError(DomainException):
    """Referenced record does not exist or belongs to another user"""

    pass


class ConflictError(DomainException):
    """Operation conflicts with the current state of a record"""

    pass
