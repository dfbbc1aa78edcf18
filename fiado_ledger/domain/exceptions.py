"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class CustomerNotFoundError(DomainException):
    """Referenced customer does not exist"""

    def __init__(self, customer_id: int):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class ClosureStampError(DomainException):
    """Closure membership could not be stamped; the closure was not kept"""

    pass


class ReminderGenerationError(DomainException):
    """Text-generation service failed or returned an unusable response"""

    pass
