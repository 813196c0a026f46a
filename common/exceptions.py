"""
Errors raised by the wallet, job and referral services.

Every service validates its preconditions and raises one of these before it
writes anything, so a caught LedgerError always means "nothing changed".
Views turn them into ErrorResponse objects with common.responses.ledger_error_response.
"""

from rest_framework import status


class LedgerError(Exception):
    """Base exception for ledger and settlement operations"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation could not be completed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class NotFound(LedgerError):
    """Raised when the entity an operation targets does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Unauthorized(LedgerError):
    """Raised when the acting user may not perform the operation"""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class InvalidState(LedgerError):
    """Raised when the operation is not valid for the entity's current status"""
    default_message = "Operation is not allowed in the current state"


class InvalidAmount(LedgerError):
    """Raised when an amount is missing, zero or negative"""
    default_message = "Invalid amount"


class InsufficientBalance(LedgerError):
    """Raised when a debit would take a balance below zero"""
    default_message = "Insufficient balance"


class BelowMinimumSpend(LedgerError):
    """Raised when a job budget is below the configured minimum spend"""


class AlreadyProcessed(LedgerError):
    """Raised on a second approve/reject of something that was already settled"""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Already processed"


class InvalidMetadata(LedgerError):
    """Raised when transaction metadata does not match the schema of its transaction type"""
    default_message = "Invalid transaction metadata"
