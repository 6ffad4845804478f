"""Symbolic names for LDAP result codes."""

from ldaptor.protocols.ldap import ldaperrors

SUCCESS = ldaperrors.Success.resultCode


def name(code):
    """
    Get the symbolic name of an LDAP result code, e.g. C{invalidCredentials}.

    Codes ldaptor does not know about are reported as C{unknownError}.
    """
    cls = ldaperrors.LDAPExceptionCollection.collection.get(code)
    if cls is None or cls.name is None:
        return "unknownError"
    value = cls.name
    if isinstance(value, bytes):
        value = value.decode("ascii")
    return value


def describe(code):
    return "%s(%d)" % (name(code), code)
