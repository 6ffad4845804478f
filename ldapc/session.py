"""
Driving one LDAP session: connect, secure, bind, search, disconnect.

Every stage takes the L{Session} and either completes or raises one of
the L{ldapc.errors} exceptions; L{run} makes sure the connection is
closed whichever way the pipeline ends.
"""

from twisted.internet import defer
from twisted.python import log

from ldaptor.protocols import pureldap

from ldapc import errors, resultcodes
from ldapc.protocols import ldapconnector, tls
from ldapc.search import PagedSearch

DEFAULT_PORT = 389
DEFAULT_CAPATH = "/etc/ssl/cert.pem"

NEEDS_STARTTLS = 0x01
NEEDS_TLS = 0x02
NEEDS_AUTH = 0x04


class Session:
    """
    Connection settings and, once connected, the client protocol.

    @ivar flags: a combination of L{NEEDS_STARTTLS}, L{NEEDS_TLS} and
        L{NEEDS_AUTH}
    @ivar client: the connected L{LDAPClient}, or None
    """

    client = None

    def __init__(self, host, port=DEFAULT_PORT, capath=DEFAULT_CAPATH,
                 binddn=None, secret=None, flags=0):
        self.host = host
        self.port = port
        self.capath = capath
        self.binddn = binddn
        self.secret = secret
        self.flags = flags

    def needs(self, flag):
        return bool(self.flags & flag)

    def __repr__(self):
        l = ["host=%r" % (self.host,), "port=%r" % (self.port,)]
        if self.binddn is not None:
            l.append("binddn=%r" % (self.binddn,))
        l.append("flags=0x%02x" % (self.flags,))
        return self.__class__.__name__ + "(" + ", ".join(l) + ")"


@defer.inlineCallbacks
def connect(reactor, session, **kw):
    """
    Open the TCP connection and attach its client to C{session}.

    Extra keyword arguments are passed to
    L{ldapconnector.connectToServer}.
    """
    session.client = yield ldapconnector.connectToServer(
        reactor, session.host, session.port, **kw)
    return session


@defer.inlineCallbacks
def negotiateStartTLS(client):
    """
    Ask the server to switch to TLS.

    @raise NegotiationError: when the server refuses.
    """
    log.msg("requesting STARTTLS")
    msgid = client.send(pureldap.LDAPStartTLSRequest())
    msg = yield client.readResponse(msgid)
    op = msg.value
    if not isinstance(op, pureldap.LDAPExtendedResponse):
        raise errors.ProtocolError(
            "unexpected %s in response to STARTTLS" % (op.__class__.__name__,))
    if op.resultCode != resultcodes.SUCCESS:
        raise errors.NegotiationError(op.resultCode, op.errorMessage)
    if op.responseName is not None and \
            op.responseName != pureldap.LDAPStartTLSResponse.oid:
        raise errors.ProtocolError(
            "invalid responseName in STARTTLS response: %r" % (op.responseName,))


@defer.inlineCallbacks
def secure(session, contextFactory=None):
    """
    Negotiate STARTTLS and/or wrap the connection in TLS, as the session
    flags ask. STARTTLS is always answered before the wrap begins.

    @param contextFactory: TLS client options to use instead of the ones
        built from the session host and CA path.
    """
    if session.needs(NEEDS_STARTTLS):
        yield negotiateStartTLS(session.client)

    if session.needs(NEEDS_STARTTLS | NEEDS_TLS):
        log.msg("starting TLS")
        if contextFactory is None:
            contextFactory = tls.clientTLSOptions(session.host, session.capath)
        yield session.client.startTLS(contextFactory)


@defer.inlineCallbacks
def authenticate(session):
    """
    Simple bind with the session DN and secret, if the session needs it.

    @raise AuthError: when the server rejects the credentials.
    """
    if not session.needs(NEEDS_AUTH):
        return
    log.msg("bind request")
    client = session.client
    msgid = client.send(pureldap.LDAPBindRequest(dn=session.binddn, auth=session.secret))
    msg = yield client.readResponse(msgid)
    op = msg.value
    if not isinstance(op, pureldap.LDAPBindResponse):
        raise errors.ProtocolError(
            "unexpected %s in response to bind" % (op.__class__.__name__,))
    if op.resultCode != resultcodes.SUCCESS:
        raise errors.AuthError(op.resultCode, op.errorMessage)


@defer.inlineCallbacks
def disconnect(session):
    """Close the session connection; safe to call more than once."""
    client, session.client = session.client, None
    if client is not None:
        yield client.close()


@defer.inlineCallbacks
def run(reactor, session, request, writer, pageSize=None,
        contextFactory=None, **kw):
    """
    Connect, secure and authenticate C{session}, then run C{request}
    writing entries to C{writer}.

    @return: a Deferred firing with the number of entries written.
    """
    yield connect(reactor, session, **kw)
    try:
        yield secure(session, contextFactory)
        yield authenticate(session)
        log.msg("connected")
        search = PagedSearch(session.client, request, writer, pageSize=pageSize)
        count = yield search.run()
    finally:
        yield disconnect(session)
    return count
