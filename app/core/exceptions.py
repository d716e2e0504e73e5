"""
Custom exceptions for the application
"""

class BaseAppException(Exception):
    """Base application exception"""
    error_code = "app_error"

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class NotFoundError(BaseAppException):
    """Raised when a resource is not found"""
    error_code = "not_found"


class ValidationError(BaseAppException):
    """Raised when validation fails"""
    error_code = "validation_error"

    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, details)
        if error_code:
            self.error_code = error_code


class BusinessLogicError(BaseAppException):
    """Raised when business logic constraints are violated"""
    error_code = "business_rule_violation"


class ExternalServiceError(BaseAppException):
    """Raised when external service calls fail"""
    error_code = "external_service_error"
    retryable = False


# --- Budgets ---

class InvalidAmountError(ValidationError):
    """Budget amount is non-positive, too large or has more than 2 decimals"""
    error_code = "invalid_amount"


class InvalidPeriodError(ValidationError):
    """Budget period is not one of the supported period types"""
    error_code = "invalid_period"


class InvalidCategoryError(ValidationError):
    """Category is missing, inactive, not an expense category or not visible to the user"""
    error_code = "invalid_category"


class BudgetNotFoundError(NotFoundError):
    """Budget does not exist or belongs to another user"""
    error_code = "budget_not_found"

    def __init__(self, budget_id, details: str = None):
        self.budget_id = budget_id
        super().__init__("Budget not found", details)


class BudgetOverlapError(BusinessLogicError):
    """An active budget already covers this category in an overlapping window"""
    error_code = "budget_overlap"

    def __init__(self, blocking_budget_id, blocking_period: str, blocking_window: str = None):
        self.blocking_budget_id = blocking_budget_id
        self.blocking_period = blocking_period
        self.blocking_window = blocking_window
        message = f"An active {blocking_period} budget already exists for this category in the specified time period"
        if blocking_window:
            message = f"{message} ({blocking_window})"
        super().__init__(message)


class BudgetReactivationError(BusinessLogicError):
    """Deactivated budgets are kept for history and cannot be reactivated"""
    error_code = "budget_reactivation"


class AggregationFailureError(ExternalServiceError):
    """The transaction store could not compute spend; safe to retry"""
    error_code = "aggregation_failure"
    retryable = True
