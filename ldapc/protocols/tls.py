"""Client TLS configuration from a CA bundle."""

import re

from OpenSSL import crypto
from twisted.internet import ssl

from ldapc import errors

_PEM_CERTIFICATE = re.compile(
    br"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----", re.DOTALL
)


def loadTrustRoot(capath):
    """
    Trust exactly the certificates found in the PEM file C{capath}.

    @raise ConfigError: if the file cannot be read or holds no usable
        certificate.
    """
    try:
        with open(capath, "rb") as f:
            data = f.read()
    except OSError as e:
        raise errors.ConfigError("unable to set CA %s: %s" % (capath, e.strerror))

    pems = _PEM_CERTIFICATE.findall(data)
    if not pems:
        raise errors.ConfigError("unable to set CA %s: no certificates found" % (capath,))
    try:
        certificates = [ssl.Certificate.loadPEM(pem) for pem in pems]
    except crypto.Error as e:
        raise errors.ConfigError("unable to set CA %s: %s" % (capath, e))
    return ssl.trustRootFromCertificates(certificates)


def clientTLSOptions(hostname, capath):
    """
    Build the context factory used to wrap a connection to C{hostname}.

    The server certificate must chain to one of the certificates in
    C{capath} and match C{hostname}.
    """
    return ssl.optionsForClientTLS(hostname, trustRoot=loadTrustRoot(capath))
