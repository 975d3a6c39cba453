"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input is malformed (negative horizon, negative limit, bad dates)"""

    pass


class NotFoundError(DomainException):
    """Referenced invoice or client does not exist for this user"""

    pass


class DependencyError(DomainException):
    """Record store is unreachable or a query failed"""

    pass
