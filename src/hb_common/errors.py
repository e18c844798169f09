"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Validation
  3xxx: Member
  4xxx: Billing / Ledger
  5xxx: Configuration / Admin allowlist
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UnauthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Authentication required", 401)


class PermissionDeniedError(AppError):
    def __init__(self, detail: str = "Admin access required") -> None:
        super().__init__(1002, f"Permission denied: {detail}", 403)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid username or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Email already exists", 409)


class UserNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1008, f"User not found: {user_id}", 404)


# --- 2xxx: Validation ---

class ValidationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Validation failed: {detail}", 422)


# --- 3xxx: Member ---

class MemberNotFoundError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(3001, f"Member not found: {member_id}", 404)


class MemberNotActiveError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(3002, f"Member is not active: {member_id}", 422)


class DuplicateMemberError(AppError):
    def __init__(self, phone: str) -> None:
        super().__init__(3003, f"A member with phone {phone} already exists", 409)


class MemberConflictError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(3004, f"Member {member_id} was modified concurrently, retry", 409)


# --- 4xxx: Billing / Ledger ---

class LedgerEntryNotFoundError(AppError):
    def __init__(self, member_id: str, billing_month: str) -> None:
        super().__init__(
            4001,
            f"Ledger entry not found for member {member_id}, period {billing_month}",
            404,
        )


class NoActiveMembersError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "No active members to bill", 422)


class BalanceConflictError(AppError):
    def __init__(self, member_id: str) -> None:
        super().__init__(
            4003,
            f"Outstanding balance of member {member_id} was modified concurrently",
            409,
        )


# --- 5xxx: Configuration / Admin allowlist ---

class GlobalSettingsNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(5001, "Global settings not found", 404)


class AdminConfigNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(5002, "Admin configuration not found", 404)


class StaleConfigurationError(AppError):
    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            5003,
            f"Global settings changed concurrently: expected version {expected}, found {actual}",
            409,
        )


class AdminLimitReachedError(AppError):
    def __init__(self, limit: int) -> None:
        super().__init__(5004, f"Admin limit reached: at most {limit} admins", 422)


class AdminNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(5005, f"Admin not found: {user_id}", 404)


class AdminExistsError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(5006, f"User {user_id} is already an admin", 409)


class PrimaryAdminRemovalError(AppError):
    def __init__(self) -> None:
        super().__init__(5007, "The primary admin cannot be removed", 422)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
