"""
FlightSurety Exception Hierarchy

All exceptions inherit from FlightSuretyError for easy catching.
Every failure aborts the whole call; the store rolls back before re-raising.
"""


class FlightSuretyError(Exception):
    """Base exception for all FlightSurety errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(FlightSuretyError):
    """Raised when caller-supplied data is malformed"""
    pass


class ConfigError(FlightSuretyError):
    """Raised when ledger configuration is invalid"""
    pass


class AuditError(FlightSuretyError):
    """Raised when the audit stream cannot be written"""
    pass


class AccessError(FlightSuretyError):
    """Raised when a caller may not perform an operation"""
    pass


class NotOwner(AccessError):
    """Admin-only operation called by a non-owner identity"""
    pass


class NotOperational(AccessError):
    """System disabled"""
    pass


class NotActiveMember(AccessError):
    """Governance operation called by an airline that is not active"""
    pass


class SelfVote(AccessError):
    """An airline attempted to approve its own candidacy"""
    pass


class FundingError(FlightSuretyError):
    """Raised when airline funding is rejected"""
    pass


class InsufficientFee(FundingError):
    """Funding amount below the membership fee"""
    pass


class SettlementError(FlightSuretyError):
    """Raised when claim settlement fails"""
    pass


class TransferFailed(SettlementError):
    """Outward payout transfer did not succeed"""
    pass


class BalanceUnderflow(SettlementError):
    """Crediting would drive a passenger balance below zero"""
    pass
