"""Utilities for writing Twistedy unit tests against the LDAP client."""

from twisted.internet import defer, error
from twisted.internet.testing import StringTransport
from twisted.python import failure
from twisted.trial import unittest

from ldaptor.protocols import pureber, pureldap

from ldapc.protocols.ldapclient import LDAPClient


def mustRaise(dummy):
    raise unittest.FailTest('Should have raised an exception.')


DISCONNECT = 'disconnect'


class FakeTransport(StringTransport):
    """
    A StringTransport that knows about STARTTLS and tells its protocol
    when the connection goes away.

    @ivar tlsFailure: when set, the next L{startTLS} loses the connection
        with this failure instead of completing the handshake.
    """

    tlsFailure = None

    def __init__(self, proto):
        StringTransport.__init__(self)
        self.proto = proto
        self.tls = []
        self.lost = 0

    def startTLS(self, contextFactory):
        self.tls.append(contextFactory)
        if self.tlsFailure is not None:
            self._lose(self.tlsFailure)
        else:
            self.proto.handshakeCompleted()

    def loseConnection(self):
        StringTransport.loseConnection(self)
        self._lose(failure.Failure(error.ConnectionDone()))

    def _lose(self, reason):
        self.lost += 1
        self.proto.connectionLost(reason)


class ScriptedServer:
    """
    Plays the server side of a conversation with an LDAPClient.

    Pass in a list of lists of responses. For each request received
    that needs an answer, the first list is popped and its items are
    sent back, in order, with the message id of the request. An item is
    either a LDAPProtocolResponse, a (response, controls) tuple, a
    complete LDAPMessage that is sent as is (to send a wrong id), or
    L{DISCONNECT} to drop the connection. Every decoded request is kept
    in self.received. Set tlsFailure to make the TLS handshake fail.
    """

    berdecoder = LDAPClient.berdecoder
    tlsFailure = None

    def __init__(self, *responses):
        self.responses = list(responses)
        self.received = []
        self.transport = None
        self.buffer = b''

    def connect(self, client=None):
        """Connect C{client} (a new LDAPClient by default) to this server."""
        if client is None:
            client = LDAPClient()
        self.transport = FakeTransport(client)
        self.transport.write = self.dataReceived
        self.transport.tlsFailure = self.tlsFailure
        client.makeConnection(self.transport)
        return client

    def dataReceived(self, data):
        self.buffer += data
        while True:
            try:
                o, bytes = pureber.berDecodeObject(self.berdecoder, self.buffer)
            except pureber.BERExceptionInsufficientData:
                o, bytes = None, 0
            self.buffer = self.buffer[bytes:]
            if o is None:
                break
            self.received.append(o)
            if o.value.needs_answer:
                self._answer(o)

    def _answer(self, request):
        assert self.responses, 'Ran out of responses for %r' % (request,)
        for r in self.responses.pop(0):
            if r is DISCONNECT:
                self.transport.loseConnection()
                return
            if isinstance(r, pureldap.LDAPMessage):
                msg = r
            elif isinstance(r, tuple):
                op, controls = r
                msg = pureldap.LDAPMessage(op, controls=controls, id=request.id)
            else:
                msg = pureldap.LDAPMessage(r, id=request.id)
            self.transport.proto.dataReceived(msg.toWire())

    def requests(self, klass=pureldap.LDAPProtocolRequest):
        """The operations received so far that are instances of C{klass}."""
        return [m.value for m in self.received if isinstance(m.value, klass)]


class FakeEndpoint:
    """
    A client endpoint connecting protocols to a L{ScriptedServer}, or
    failing with C{reason}.
    """

    def __init__(self, server=None, reason=None):
        self.server = server
        self.reason = reason
        self.attempts = []

    def __call__(self, reactor, host, port):
        self.attempts.append((host, port))
        return self

    def connect(self, factory):
        if self.reason is not None:
            return defer.fail(self.reason)
        proto = factory.buildProtocol(None)
        self.server.connect(proto)
        return defer.succeed(proto)
