class SmartmarksError(Exception):
    pass


class AuthenticationRequired(SmartmarksError):
    pass


class ValidationError(SmartmarksError):
    pass


class MutationError(SmartmarksError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FeedError(SmartmarksError):
    pass


class SubscriptionClosed(SmartmarksError):
    pass


class ServiceUnavailable(SmartmarksError):
    pass
