from fastapi import HTTPException, status
from typing import Optional, Dict, Any


class BaseAPIException(HTTPException):
    """Base exception for API errors"""
    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={
                "success": False,
                "error": {
                    "code": error_code,
                    "message": message,
                    "details": self.details
                }
            }
        )

    def __str__(self) -> str:  # Ensure str(e) returns the human message
        return self.message


class AuthenticationError(BaseAPIException):
    """Authentication related errors"""
    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTH_001",
            message=message,
            details=details
        )
        self.headers = {"WWW-Authenticate": "Bearer"}


class ValidationError(BaseAPIException):
    """Validation errors"""
    def __init__(self, message: str = "Validation failed", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_001",
            message=message,
            details=details
        )


class InvalidOrderNumberError(BaseAPIException):
    """Order number failed the Luhn check"""
    def __init__(self, number: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="ORDER_001",
            message="Invalid order number",
            details={"number": number}
        )


class OrderAlreadyUploadedError(BaseAPIException):
    """Order was already uploaded by the same user (idempotent outcome)"""
    def __init__(self, number: str):
        super().__init__(
            status_code=status.HTTP_200_OK,
            error_code="ORDER_002",
            message="Order already uploaded by this user",
            details={"number": number}
        )


class OrderOwnershipConflictError(BaseAPIException):
    """Order belongs to another user"""
    def __init__(self, number: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="ORDER_003",
            message="Order already uploaded by another user",
            details={"number": number}
        )


class InsufficientBalanceError(BaseAPIException):
    """Insufficient balance errors"""
    def __init__(self, message: str = "Insufficient balance", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            error_code="BALANCE_001",
            message=message,
            details=details
        )


class InvalidAmountError(BaseAPIException):
    """Non-positive point amount"""
    def __init__(self, message: str = "Amount must be positive", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="BALANCE_002",
            message=message,
            details=details
        )


class StorageError(BaseAPIException):
    """Persistence layer failures"""
    def __init__(self, message: str = "Storage failure", details: Optional[Dict] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="STORAGE_001",
            message=message,
            details=details
        )


class ServiceException(Exception):
    """Base exception for service layer errors"""
    pass


class OrderNumberTakenError(ServiceException):
    """Unique constraint on the order number was violated by a concurrent insert"""

    def __init__(self, number: str):
        super().__init__(f"Order number {number} already exists")
        self.number = number


class AccrualServiceError(ServiceException):
    """Accrual system call failed (transport, protocol or unexpected status)"""
    pass


class AccrualRateLimitError(AccrualServiceError):
    """Accrual system answered 429 Too Many Requests"""

    def __init__(self, retry_after: int):
        super().__init__(f"Rate limited by accrual system, retry after {retry_after}s")
        self.retry_after = retry_after


class UnknownAccrualStatusError(AccrualServiceError):
    """Accrual system reported a status outside the known vocabulary"""

    def __init__(self, status: str):
        super().__init__(f"Unknown accrual status: {status!r}")
        self.status = status
