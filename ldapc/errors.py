"""Errors raised while driving an LDAP session."""

from ldapc import resultcodes


class LDAPClientError(Exception):
    """Base class for every failure of the session pipeline."""


class ResolutionError(LDAPClientError):
    def __init__(self, host, port, reason=None):
        LDAPClientError.__init__(self, host, port, reason)
        self.host = host
        self.port = port
        self.reason = reason

    def __str__(self):
        message = "cannot resolve %s port %s" % (self.host, self.port)
        if self.reason:
            message += ": %s" % (self.reason,)
        return message


class ConnectionFailedError(LDAPClientError):
    def __init__(self, host, port, reason=None):
        LDAPClientError.__init__(self, host, port, reason)
        self.host = host
        self.port = port
        self.reason = reason

    def __str__(self):
        message = "LDAP connection to %s port %s failed" % (self.host, self.port)
        if self.reason:
            message += ": %s" % (self.reason,)
        return message


class ConfigError(LDAPClientError):
    """The TLS configuration could not be built."""


class TLSError(LDAPClientError):
    def __init__(self, reason=None):
        LDAPClientError.__init__(self, reason)
        self.reason = reason

    def __str__(self):
        if self.reason is None:
            return "TLS failed"
        return "TLS failed: %s" % (self.reason,)


class ProtocolError(LDAPClientError):
    """The server sent something this client cannot correlate."""


class ResultCodeError(LDAPClientError):
    """
    The server answered with a result code other than success.

    @ivar resultCode: the numeric code received
    @ivar errorMessage: the diagnostic message from the server, if any
    """

    stage = "LDAP operation"

    def __init__(self, resultCode, errorMessage=None):
        LDAPClientError.__init__(self, resultCode, errorMessage)
        self.resultCode = resultCode
        if isinstance(errorMessage, bytes):
            errorMessage = errorMessage.decode("utf-8", "replace")
        self.errorMessage = errorMessage

    def __str__(self):
        message = "%s failed: %s" % (self.stage, resultcodes.describe(self.resultCode))
        if self.errorMessage:
            message += ": %s" % (self.errorMessage,)
        return message


class NegotiationError(ResultCodeError):
    stage = "STARTTLS"


class AuthError(ResultCodeError):
    stage = "bind"


class SearchError(ResultCodeError):
    stage = "LDAP search"
