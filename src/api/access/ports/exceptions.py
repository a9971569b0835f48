"""Port-level exceptions for the access bounded context.

These exceptions represent errors that can occur during repository and
adapter operations. They should be caught and handled by the application
layer or mapped to HTTP responses by the presentation layer.
"""

from access.domain.exceptions import AccessError


class PersistenceError(AccessError):
    """Raised when the database fails in a way this context cannot interpret.

    The original exception is chained. Callers should log it with context
    and present a generic, retryable failure.
    """

    pass


class DuplicateTenantSlugError(AccessError):
    """Raised when a tenant slug is already taken.

    Tenant slugs are globally unique because they appear in URLs.
    """

    pass


class TenantNotFoundError(AccessError):
    """Raised when a tenant cannot be found."""

    pass


class TenantHasChildrenError(AccessError):
    """Raised when deleting a tenant that still has child tenants.

    Children must be reassigned or deleted first so the hierarchy never
    holds a dangling parent reference.
    """

    pass


class DuplicateRegistrationCodeError(AccessError):
    """Raised when a registration code string already exists.

    Generated candidates are not pre-checked, so a collision is reported
    here and the caller may simply generate another candidate.
    """

    pass


class RegistrationCodeNotFoundError(AccessError):
    """Raised when a registration code cannot be found by id."""

    pass


class RedemptionNotFoundError(AccessError):
    """Raised when releasing a redemption that does not exist or was already released."""

    pass


class ConfirmationMismatchError(AccessError):
    """Raised when a dangerous operation's typed confirmation does not match."""

    pass


class UnauthorizedError(AccessError):
    """Raised when the acting user lacks the platform role an operation needs.

    The presentation layer returns HTTP 403 without exposing details.
    """

    pass


class AddressServiceUnavailableError(AccessError):
    """Raised when the address validation service cannot be reached or errors."""

    pass
