"""
Relay Hub Exceptions

Custom exception classes for error handling
"""


class RelayHubError(Exception):
    """Base Relay Hub exception"""

    def __init__(self, message: str, error_code: str = "HUB000", details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {
            "error_code": self.error_code,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# Session errors
class SessionError(RelayHubError):
    """Session error"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "SESSION001", details)


class UnknownSessionError(SessionError):
    """Event from an identity that is not in the registry"""

    def __init__(self, session_id: str, details: dict = None):
        message = f"Unknown session: {session_id}"
        super().__init__(message, details)
        self.error_code = "SESSION002"
        self.session_id = session_id


# Role errors
class RoleError(RelayHubError):
    """Role error"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "ROLE001", details)


class RoleTransitionError(RoleError):
    """Role change between master and client"""

    def __init__(self, session_id: str, current: str, requested: str, details: dict = None):
        message = f"Session {session_id} cannot change role from {current} to {requested}"
        super().__init__(message, details)
        self.error_code = "ROLE002"
        self.session_id = session_id
        self.current = current
        self.requested = requested


# Routing errors
class RoutingError(RelayHubError):
    """Routing error"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "ROUTE001", details)


class InvalidPayloadError(RoutingError):
    """Payload data is not a non-empty string"""

    def __init__(self, message: str = "Data must be a non-empty string", details: dict = None):
        super().__init__(message, details)
        self.error_code = "ROUTE002"


class NoMasterError(RoutingError):
    """No master registered to receive a client payload"""

    def __init__(self, message: str = "No master available", details: dict = None):
        super().__init__(message, details)
        self.error_code = "ROUTE003"


# Configuration errors
class ConfigurationError(RelayHubError):
    """Configuration error"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, "CONFIG001", details)


class InvalidConfigurationError(ConfigurationError):
    """Invalid configuration error"""

    def __init__(self, key: str, value: str, details: dict = None):
        message = f"Invalid configuration: {key} = {value}"
        super().__init__(message, details)
        self.error_code = "CONFIG002"
        self.key = key
        self.value = value


# Error code mapping
ERROR_CODE_MAP = {
    "HUB000": RelayHubError,
    "SESSION001": SessionError,
    "SESSION002": UnknownSessionError,
    "ROLE001": RoleError,
    "ROLE002": RoleTransitionError,
    "ROUTE001": RoutingError,
    "ROUTE002": InvalidPayloadError,
    "ROUTE003": NoMasterError,
    "CONFIG001": ConfigurationError,
    "CONFIG002": InvalidConfigurationError,
}
