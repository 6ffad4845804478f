from zope.interface import Interface


class ILDAPConfig(Interface):
    """Settings for an LDAP session."""

    def getHost():
        """
        Get the host name of the directory server.

        @raise ldapc.config.MissingHostError: if no host is configured.
        """

    def getPort():
        """Get the TCP port of the directory server, as an int."""

    def getCAPath():
        """Get the path of the PEM bundle trusted for TLS."""

    def getBaseDN():
        """Get the base DN of searches; the empty string is the root."""

    def getScope():
        """Get the search scope, as one of the pureldap.LDAP_SCOPE_* values."""

    def getPageSize():
        """Get the paged results size to request, or None to not ask for pages."""


class IEntryWriter(Interface):
    """Sink for search result entries, in arrival order."""

    def writeEntry(dn, attributes):
        """
        Output one entry.

        @param dn: the distinguished name of the entry
        @type dn: str
        @param attributes: (name, values) pairs, in the order the server
            sent them
        """
