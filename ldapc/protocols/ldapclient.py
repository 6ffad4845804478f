"""LDAP protocol client"""

from zope.interface import implementer

from twisted.internet import defer, error, protocol
from twisted.internet.interfaces import IHandshakeListener
from twisted.python import log

from ldaptor.protocols import pureber, pureldap

from ldapc import errors


class LDAPClientConnectionLostException(errors.LDAPClientError):
    def __str__(self):
        return "Connection lost"


class LDAPClientBusyError(errors.LDAPClientError):
    def __init__(self, outstanding):
        errors.LDAPClientError.__init__(self, outstanding)
        self.outstanding = outstanding

    def __str__(self):
        return "Cannot send while message %d is waiting for an answer" % (
            self.outstanding,
        )


@implementer(IHandshakeListener)
class LDAPClient(protocol.Protocol):
    """
    An LDAP client that keeps a single request on the wire.

    Every decoded message is queued in arrival order and handed out by
    L{readMessage}; it is up to the caller to match it against the
    request it sent, which L{readResponse} does.
    """

    debug = False

    berdecoder = pureldap.LDAPBERDecoderContext_TopLevel(
        inherit=pureldap.LDAPBERDecoderContext_LDAPMessage(
            fallback=pureldap.LDAPBERDecoderContext(
                fallback=pureber.BERDecoderContext()
            ),
            inherit=pureldap.LDAPBERDecoderContext(
                fallback=pureber.BERDecoderContext()
            ),
        )
    )

    def __init__(self):
        self.buffer = b""
        self.connected = False
        self.outstanding = None
        self._nextMessageID = 1
        self._inbox = []
        self._readers = []
        self._handshake = None
        self._closing = None

    def dataReceived(self, recd):
        self.buffer += recd
        while True:
            try:
                o, bytes = pureber.berDecodeObject(self.berdecoder, self.buffer)
            except pureber.BERExceptionInsufficientData:
                o, bytes = None, 0
            self.buffer = self.buffer[bytes:]
            if not bytes:
                break
            if o is not None:
                self.handle(o)

    def connectionMade(self):
        """TCP connection has opened"""
        self.connected = True

    def connectionLost(self, reason=protocol.connectionDone):
        """Called when TCP connection has been lost"""
        self.connected = False
        if self._handshake is not None:
            d, self._handshake = self._handshake, None
            d.errback(errors.TLSError(reason.value))
        # nobody is going to answer the readers now
        while self._readers:
            self._readers.pop(0).errback(reason)
        if self._closing is not None:
            d, self._closing = self._closing, None
            d.callback(None)

    def handshakeCompleted(self):
        """The TLS handshake started by L{startTLS} has finished."""
        if self._handshake is not None:
            d, self._handshake = self._handshake, None
            d.callback(self)

    def _allocateMessageID(self):
        r = self._nextMessageID
        self._nextMessageID += 1
        return r

    def _send(self, op, controls=None):
        if not self.connected:
            raise LDAPClientConnectionLostException()
        msg = pureldap.LDAPMessage(
            op, controls=controls, id=self._allocateMessageID()
        )
        if self.debug:
            log.msg("C->S %s id=%d" % (op.__class__.__name__, msg.id))
        self.transport.write(msg.toWire())
        return msg.id

    def send(self, op, controls=None):
        """
        Send an LDAP operation to the server.

        @param op: the operation to send
        @type op: LDAPProtocolRequest
        @param controls: any controls to be included in the request, as
            (controlType, criticality, controlValue) tuples
        @return: the message id of the request
        @rtype: int
        """
        assert op.needs_answer
        if self.outstanding is not None:
            raise LDAPClientBusyError(self.outstanding)
        self.outstanding = self._send(op, controls=controls)
        return self.outstanding

    def send_noResponse(self, op, controls=None):
        """
        Send an LDAP operation to the server, with no response
        expected.
        """
        assert not op.needs_answer
        self._send(op, controls=controls)

    def handle(self, msg):
        if self.debug:
            log.msg("C<-S %s id=%d" % (msg.value.__class__.__name__, msg.id))
        if self._readers:
            self._readers.pop(0).callback(msg)
        else:
            self._inbox.append(msg)

    def readMessage(self):
        """
        Get the next message from the server.

        @return: a Deferred firing with the next C{LDAPMessage}, in arrival
            order.
        """
        if self._inbox:
            return defer.succeed(self._inbox.pop(0))
        if not self.connected:
            return defer.fail(LDAPClientConnectionLostException())
        d = defer.Deferred()
        self._readers.append(d)
        return d

    @defer.inlineCallbacks
    def readResponse(self, msgid):
        """
        Read the next message and check that it answers request C{msgid}.

        The outstanding request is considered answered once a final
        C{LDAPResult} arrives for it.

        @raise ProtocolError: if the connection goes away first or the
            message identifier does not match.
        """
        try:
            msg = yield self.readMessage()
        except (error.ConnectionClosed, LDAPClientConnectionLostException):
            raise errors.ProtocolError(
                "connection closed while waiting for a response to message %d"
                % (msgid,)
            )
        except Exception as e:
            # readers only fail when the connection is lost
            raise errors.ProtocolError(
                "connection lost while waiting for a response to message %d: %s"
                % (msgid, e)
            )
        if msg.id != msgid:
            raise errors.ProtocolError(
                "expected a response to message %d, got message %d (%s)"
                % (msgid, msg.id, msg.value.__class__.__name__)
            )
        if isinstance(msg.value, pureldap.LDAPResult):
            self.outstanding = None
        return msg

    def startTLS(self, contextFactory):
        """
        Start Transport Layer Security on the current connection.

        Only the transport is wrapped; an in-band STARTTLS request, if the
        server needs one, must have been answered before this is called.

        @return: a Deferred firing with this client once the handshake has
            completed, or failing with L{TLSError} when the connection is
            lost during the handshake.
        """
        if not self.connected:
            raise LDAPClientConnectionLostException()
        if self.outstanding is not None:
            raise LDAPClientBusyError(self.outstanding)
        d = self._handshake = defer.Deferred()
        self.transport.startTLS(contextFactory)
        return d

    def close(self):
        """
        Unbind and drop the connection. Only the first call has any effect.

        @return: a Deferred firing once the connection is gone.
        """
        if self._closing is not None:
            return self._closing
        if not self.connected:
            return defer.succeed(None)
        d = self._closing = defer.Deferred()
        self.send_noResponse(pureldap.LDAPUnbindRequest())
        self.transport.loseConnection()
        return d
