"""Exception hierarchy shared by the scrape pipeline."""


class ExporterError(Exception):
    """Base class for every error raised by eureka_exporter."""


class TransportError(ExporterError):
    """A request did not complete at the transport level."""


class UnreachableError(TransportError):
    """The target refused the connection or could not be reached."""


class NoResponseError(TransportError):
    """The server closed the connection without sending a response."""


class RequestTimeoutError(TransportError):
    """A connect, pool acquisition, read or write timeout expired."""


class ParseError(ExporterError):
    """A registry payload is malformed or lacks an expected field."""


class HandlerError(ExporterError):
    """A response handler failed after the response was received."""


class ConfigError(ExporterError):
    """A configuration value is missing or malformed."""
