"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed or violates an ordering/uniqueness rule"""

    pass


class UnauthenticatedError(ValidationError):
    """Caller identity is missing"""

    pass


class NotFoundError(DomainException):
    """Referenced record does not exist for this user"""

    pass


class StoreError(DomainException):
    """Transaction store failed while performing an operation"""

    pass
