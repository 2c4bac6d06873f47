"""Error types raised by the storefront and rendered as JSON by the app."""


class BakeryError(Exception):
    """Base error with a user-facing message and an HTTP status"""
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class ValidationError(BakeryError):
    status_code = 400


class ConfigurationIncomplete(ValidationError):
    """A selection category for the chosen size has no value"""

    def __init__(self, category):
        super().__init__(f'Please select a {category}')
        self.category = category


class EmptyCartError(BakeryError):
    status_code = 400

    def __init__(self, message='Your cart is empty'):
        super().__init__(message)


class NotFound(BakeryError):
    status_code = 404


class InvalidTransition(BakeryError):
    status_code = 409


class SubmissionInProgress(BakeryError):
    status_code = 409

    def __init__(self, message='A request is already in progress'):
        super().__init__(message)


class ModeConflict(BakeryError):
    """The cart belongs to a different ordering mode than the new item"""
    status_code = 409

    def __init__(self, message, current_mode, requested_mode, pending_item):
        super().__init__(message)
        self.current_mode = current_mode
        self.requested_mode = requested_mode
        self.pending_item = pending_item

    def to_dict(self):
        return {
            'error': self.message,
            'conflict': {
                'currentMode': self.current_mode.to_dict() if self.current_mode else None,
                'requestedMode': self.requested_mode.to_dict(),
                'pendingItem': self.pending_item.to_dict(),
            }
        }


class UpstreamError(BakeryError):
    status_code = 502


class NetworkError(UpstreamError):
    status_code = 503


class PaymentDeclined(UpstreamError):
    status_code = 402


class PaymentConfigurationError(BakeryError):
    status_code = 503

    def __init__(self, message='Payments are not configured. Checkout is unavailable.'):
        super().__init__(message)
