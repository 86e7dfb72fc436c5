"""Exception hierarchy for host discovery."""


class ArpsweepError(Exception):
    """Base exception for all discovery errors."""


class InvalidConfig(ArpsweepError):
    """Engine configuration rejected at construction time."""


class InvalidInput(ArpsweepError):
    """Malformed arguments passed to a probe, resolve or search call."""


class InvalidAddress(InvalidInput):
    """Address string cannot be used to derive a sweep range."""


class NoActiveInterface(ArpsweepError):
    """No active non-loopback interface with an IPv4 address was found."""


class ParseError(ArpsweepError):
    """Platform tool output did not contain the expected field labels."""


class UnsupportedPlatform(ArpsweepError):
    """No platform adapter is registered for the running operating system."""

    def __init__(self, message: str, platform_name: str | None = None):
        self.platform_name = platform_name
        super().__init__(message)


class ProbeFailure(ArpsweepError):
    """A single reachability probe could not be executed."""

    def __init__(self, message: str, ip: str | None = None):
        self.ip = ip
        super().__init__(message)


class ResolveFailure(ArpsweepError):
    """A single hardware address resolution could not be executed or parsed."""

    def __init__(self, message: str, ip: str | None = None):
        self.ip = ip
        super().__init__(message)
