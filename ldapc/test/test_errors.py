"""
Test cases for ldapc.errors and ldapc.resultcodes.
"""
from twisted.trial import unittest

from ldapc import errors, resultcodes


class ResultCodeTests(unittest.TestCase):
    def test_name(self):
        self.assertEqual("success", resultcodes.name(0))
        self.assertEqual("invalidCredentials", resultcodes.name(49))
        self.assertEqual("sizeLimitExceeded", resultcodes.name(4))

    def test_unknown(self):
        self.assertEqual("unknownError", resultcodes.name(4242))

    def test_describe(self):
        self.assertEqual("invalidCredentials(49)", resultcodes.describe(49))

    def test_constants(self):
        self.assertEqual(0, resultcodes.SUCCESS)


class ErrorRepresentationTests(unittest.TestCase):
    def test_resolution(self):
        e = errors.ResolutionError("nowhere.example.com", 389, "no such host")
        self.assertEqual(
            "cannot resolve nowhere.example.com port 389: no such host", str(e))

    def test_connection_failed(self):
        e = errors.ConnectionFailedError("ldap.example.com", 636, "refused")
        self.assertEqual(
            "LDAP connection to ldap.example.com port 636 failed: refused", str(e))
        self.assertEqual(
            "LDAP connection to ldap.example.com port 636 failed",
            str(errors.ConnectionFailedError("ldap.example.com", 636)))

    def test_tls(self):
        self.assertEqual("TLS failed", str(errors.TLSError()))
        self.assertEqual("TLS failed: bad certificate",
                         str(errors.TLSError("bad certificate")))

    def test_auth(self):
        e = errors.AuthError(49, b"80090308: LdapErr")
        self.assertEqual(
            "bind failed: invalidCredentials(49): 80090308: LdapErr", str(e))
        self.assertEqual("80090308: LdapErr", e.errorMessage)

    def test_search(self):
        self.assertEqual(
            "LDAP search failed: sizeLimitExceeded(4)", str(errors.SearchError(4)))

    def test_negotiation(self):
        self.assertEqual(
            "STARTTLS failed: unavailable(52)", str(errors.NegotiationError(52)))

    def test_hierarchy(self):
        for klass in (errors.ResolutionError, errors.ConnectionFailedError,
                      errors.ConfigError, errors.TLSError, errors.ProtocolError,
                      errors.NegotiationError, errors.AuthError,
                      errors.SearchError):
            self.assertTrue(issubclass(klass, errors.LDAPClientError))
