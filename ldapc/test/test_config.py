"""
Test cases for the ldapc.config module.
"""

import os

from twisted.trial import unittest
from zope.interface import verify

from ldaptor.protocols import pureldap

from ldapc import config, interfaces


def writeFile(path, content):
    with open(path, "wb") as f:
        f.write(content)


def reloadFromContent(testCase, content):
    """
    Reload the global configuration file with raw `content`.
    """
    base_path = testCase.mktemp()
    os.mkdir(base_path)
    config_path = os.path.join(base_path, "test.cfg")
    writeFile(config_path, content)

    # Go back to the built-in defaults to reduce the side effects.
    testCase.addCleanup(config.loadConfig, configFiles=[], reload=True)

    return config.loadConfig(
        configFiles=[config_path],
        reload=True,
    )


class CleanupRecorder:
    """
    Stands in for a test case, keeping the cleanups instead of running them.
    """

    def __init__(self, testCase):
        self.mktemp = testCase.mktemp
        self.cleanups = []

    def addCleanup(self, f, *args, **kwargs):
        self.cleanups.append((f, args, kwargs))


class TestLoadConfig(unittest.TestCase):
    """
    Tests for loadConfig.
    """

    def testMultipleConfigurationFiles(self):
        """
        Later files override earlier ones, option by option.
        """
        self.dir = self.mktemp()
        os.mkdir(self.dir)
        f1 = os.path.join(self.dir, "global.cfg")
        writeFile(
            f1,
            b"""\
[ldap]
host = ldap.example.com
base = dc=example,dc=com
""",
        )
        f2 = os.path.join(self.dir, "user.cfg")
        writeFile(
            f2,
            b"""\
[ldap]
host = ldap.test.net
""",
        )
        self.addCleanup(config.loadConfig, configFiles=[], reload=True)
        cfg = config.loadConfig(configFiles=[f1, f2], reload=True)

        self.assertEqual("ldap.test.net", cfg.get("ldap", "host"))
        self.assertEqual("dc=example,dc=com", cfg.get("ldap", "base"))

    def testDefaults(self):
        cfg = reloadFromContent(self, b"")
        self.assertEqual("389", cfg.get("ldap", "port"))
        self.assertEqual("/etc/ssl/cert.pem", cfg.get("ldap", "capath"))
        self.assertEqual("sub", cfg.get("ldap", "scope"))

    def testMissingFile(self):
        """
        Configuration files that do not exist are skipped.
        """
        self.addCleanup(config.loadConfig, configFiles=[], reload=True)
        cfg = config.loadConfig(configFiles=[self.mktemp()], reload=True)
        self.assertEqual("389", cfg.get("ldap", "port"))

    def testCached(self):
        first = reloadFromContent(self, b"[ldap]\nhost=a\n")
        self.assertIs(first, config.loadConfig())

    def testReloadCleanup(self):
        """
        The cleanup registered by reloadFromContent goes back to the
        built-in defaults and registers nothing further.
        """
        recorder = CleanupRecorder(self)
        reloadFromContent(recorder, b"[ldap]\nhost=a\n")
        self.assertEqual(1, len(recorder.cleanups))

        f, args, kwargs = recorder.cleanups.pop()
        self.addCleanup(config.loadConfig, configFiles=[], reload=True)
        cfg = f(*args, **kwargs)

        self.assertEqual([], recorder.cleanups)
        self.assertFalse(cfg.has_option("ldap", "host"))
        self.assertEqual("389", cfg.get("ldap", "port"))


class TestLDAPConfig(unittest.TestCase):
    """
    Unit tests for LDAPConfig.
    """

    def setUp(self):
        reloadFromContent(self, b"")

    def testInterface(self):
        verify.verifyObject(interfaces.ILDAPConfig, config.LDAPConfig())

    def testGetHostExplicit(self):
        reloadFromContent(self, b"[ldap]\nhost=ldap.example.com\n")
        sut = config.LDAPConfig(host="other.example.com")

        self.assertEqual("other.example.com", sut.getHost())

    def testGetHostConfigured(self):
        reloadFromContent(self, b"[ldap]\nhost=ldap.example.com\n")
        sut = config.LDAPConfig()

        self.assertEqual("ldap.example.com", sut.getHost())

    def testGetHostMissing(self):
        """
        It raises an exception when no host is given anywhere.
        """
        sut = config.LDAPConfig()

        e = self.assertRaises(config.MissingHostError, sut.getHost)
        self.assertEqual("Configuration must specify a host", str(e))

    def testGetPort(self):
        self.assertEqual(389, config.LDAPConfig().getPort())
        self.assertEqual(636, config.LDAPConfig(port="636").getPort())

        reloadFromContent(self, b"[ldap]\nport=3389\n")
        self.assertEqual(3389, config.LDAPConfig().getPort())

    def testGetBaseDN(self):
        """
        The base DN defaults to the root.
        """
        self.assertEqual("", config.LDAPConfig().getBaseDN())

        reloadFromContent(self, b"[ldap]\nbase=dc=test,dc=net\n")
        self.assertEqual("dc=test,dc=net", config.LDAPConfig().getBaseDN())
        self.assertEqual("dc=x", config.LDAPConfig(baseDN="dc=x").getBaseDN())

    def testGetBaseDNEmptyOverride(self):
        """
        An empty base given explicitly searches from the root even when one
        is configured.
        """
        reloadFromContent(self, b"[ldap]\nbase=dc=test,dc=net\n")
        self.assertEqual("", config.LDAPConfig(baseDN="").getBaseDN())

    def testGetCAPath(self):
        self.assertEqual("/etc/ssl/cert.pem", config.LDAPConfig().getCAPath())
        self.assertEqual(
            "/tmp/ca.pem", config.LDAPConfig(capath="/tmp/ca.pem").getCAPath())

    def testGetScope(self):
        self.assertEqual(
            pureldap.LDAP_SCOPE_wholeSubtree, config.LDAPConfig().getScope())

        reloadFromContent(self, b"[ldap]\nscope=one\n")
        self.assertEqual(
            pureldap.LDAP_SCOPE_singleLevel, config.LDAPConfig().getScope())
        self.assertEqual(
            pureldap.LDAP_SCOPE_baseObject,
            config.LDAPConfig(scope="base").getScope())

    def testGetScopeInvalid(self):
        reloadFromContent(self, b"[ldap]\nscope=deep\n")
        self.assertRaises(ValueError, config.LDAPConfig().getScope)

    def testGetPageSize(self):
        self.assertIsNone(config.LDAPConfig().getPageSize())
        self.assertEqual(50, config.LDAPConfig(pageSize=50).getPageSize())

        reloadFromContent(self, b"[ldap]\npage-size=500\n")
        self.assertEqual(500, config.LDAPConfig().getPageSize())
