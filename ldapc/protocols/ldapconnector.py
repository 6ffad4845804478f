from twisted.internet import defer, error
from twisted.internet.endpoints import HostnameEndpoint, connectProtocol
from twisted.python import log

from ldapc import errors
from ldapc.protocols.ldapclient import LDAPClient


def hostnameEndpoint(reactor, host, port):
    """Endpoint trying every address C{host} resolves to, in order."""
    return HostnameEndpoint(reactor, host, port)


@defer.inlineCallbacks
def connectToServer(reactor, host, port, clientProtocol=LDAPClient,
                    endpointFactory=hostnameEndpoint):
    """
    Open a TCP connection to an LDAP server.

    @param port: TCP port, as an int or a numeric string
    @return: a Deferred firing with the connected C{clientProtocol}
        instance.
    @raise ResolutionError: when C{host} does not resolve to any address
    @raise ConnectionFailedError: when every resolved address failed
    """
    port = int(port)
    endpoint = endpointFactory(reactor, host, port)
    log.msg("connecting to %s port %d" % (host, port))
    try:
        client = yield connectProtocol(endpoint, clientProtocol())
    except error.DNSLookupError as e:
        raise errors.ResolutionError(host, port, e)
    except error.ConnectError as e:
        raise errors.ConnectionFailedError(host, port, e)
    return client
