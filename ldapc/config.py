import configparser
import os.path

from zope.interface import implementer

from ldapc import interfaces, search


class MissingHostError(Exception):
    """Configuration must specify a host"""

    def __str__(self):
        return self.__doc__


@implementer(interfaces.ILDAPConfig)
class LDAPConfig:
    """
    Session settings given on the command line, with the configuration
    files filling in whatever was not given.
    """

    host = None
    port = None
    baseDN = None
    capath = None
    scope = None
    pageSize = None

    def __init__(self, host=None, port=None, baseDN=None, capath=None,
                 scope=None, pageSize=None):
        if host is not None:
            self.host = host
        if port is not None:
            self.port = int(port)
        if baseDN is not None:
            self.baseDN = baseDN
        if capath is not None:
            self.capath = capath
        if scope is not None:
            self.scope = search.scopeFromName(scope)
        if pageSize is not None:
            self.pageSize = int(pageSize)

    def _get(self, option):
        cfg = loadConfig()
        try:
            return cfg.get('ldap', option)
        except (configparser.NoOptionError,
                configparser.NoSectionError):
            return None

    def getHost(self):
        if self.host is not None:
            return self.host
        host = self._get('host')
        if not host:
            raise MissingHostError
        return host

    def getPort(self):
        if self.port is not None:
            return self.port
        return int(self._get('port'))

    def getBaseDN(self):
        if self.baseDN is not None:
            return self.baseDN
        return self._get('base') or ''

    def getCAPath(self):
        if self.capath is not None:
            return self.capath
        return self._get('capath')

    def getScope(self):
        if self.scope is not None:
            return self.scope
        return search.scopeFromName(self._get('scope'))

    def getPageSize(self):
        if self.pageSize is not None:
            return self.pageSize
        pageSize = self._get('page-size')
        if not pageSize:
            return None
        return int(pageSize)


DEFAULTS = {
    'ldap': {
        'port': '389',
        'capath': '/etc/ssl/cert.pem',
        'scope': 'sub',
    },
}

CONFIG_FILES = [
    '/etc/ldapc/global.cfg',
    os.path.expanduser('~/.ldapc/global.cfg'),
]

__config = None


def loadConfig(configFiles=None,
               reload=False):
    """
    Load configuration file.
    """
    global __config
    if __config is None or reload:
        x = configparser.ConfigParser(interpolation=None)

        for section, options in DEFAULTS.items():
            x.add_section(section)
            for option, value in options.items():
                x.set(section, option, value)

        if configFiles is None:
            configFiles = CONFIG_FILES
        x.read(configFiles)
        __config = x
    return __config
