"""
Command line argument/options available to ldapc tools.
"""
from twisted.python import usage, reflect
from twisted.python.usage import UsageError

from ldapc import search

__all__ = [
    "Options",
    "Options_base_optional",
    "Options_bind",
    "Options_host",
    "Options_paging",
    "Options_scope",
    "Options_tls",
    "UsageError",
]


class Options(usage.Options):
    optParameters = ()

    def postOptions(self):
        postOpt = {}
        reflect.addMethodNamesToDict(self.__class__, postOpt, "postOptions_")
        for name in postOpt.keys():
            method = getattr(self, 'postOptions_' + name)
            method()


class Options_host:
    optParameters = (
        ('host', 'h', None,
         "LDAP server host name"),
        ('port', 'p', None,
         "LDAP server port [default: 389]"),
    )

    def postOptions_port_numeric(self):
        val = self.opts['port']
        if val is not None:
            try:
                val = int(val)
            except ValueError:
                raise usage.UsageError("port must be numeric: %s" % (val,))
            if not 0 < val < 65536:
                raise usage.UsageError("port out of range: %d" % (val,))
            self.opts['port'] = val


class Options_base_optional:
    optParameters = (
        ('base', 'b', None,
         "LDAP base dn [default: the root]"),
    )


class Options_scope:
    optParameters = (
        ('scope', 's', None,
         "LDAP search scope (one of base, one, sub) [default: sub]"),
    )

    def postOptions_scope(self):
        scope = self.opts['scope']
        if scope is None:
            return
        try:
            scope = search.scopeFromName(scope)
        except ValueError:
            raise usage.UsageError("bad scope: %s" % (scope,))
        self.opts['scope'] = scope


class Options_bind:
    """
    Simple bind options. Any of them asks for authentication, which then
    needs a bind DN.
    """

    optFlags = (
        ('prompt', 'W', "prompt for the bind secret"),
    )
    optParameters = (
        ('binddn', 'D', None,
         "use Distinguished Name to bind to the directory"),
        ('secret', 'w', None,
         "bind secret"),
        ('bind-auth-fd', None, None,
         "read bind password from filedescriptor"),
    )

    def postOptions_bind_auth_fd_numeric(self):
        val = self.opts['bind-auth-fd']
        if val is not None:
            try:
                val = int(val)
            except ValueError:
                raise usage.UsageError("bind-auth-fd value must be numeric")
            self.opts['bind-auth-fd'] = val

    def postOptions_bind(self):
        self.opts['needs-auth'] = bool(
            self.opts['binddn'] is not None
            or self.opts['secret'] is not None
            or self.opts['prompt']
            or self.opts['bind-auth-fd'] is not None)
        if self.opts['needs-auth'] and not self.opts['binddn']:
            raise usage.UsageError("missing -D binddn")


class Options_tls:
    optFlags = (
        ('starttls', 'Z', "use STARTTLS"),
        ('tls', None, "use TLS right after connecting"),
    )
    optParameters = (
        ('capath', 'c', None,
         "CA bundle trusted for TLS [default: /etc/ssl/cert.pem]"),
    )


class Options_paging:
    optParameters = (
        ('page-size', None, None,
         "ask the server for pages of this many entries"),
    )

    def postOptions_page_size(self):
        val = self.opts['page-size']
        if val is not None:
            try:
                val = int(val)
            except ValueError:
                raise usage.UsageError("page-size must be numeric")
            if val < 1:
                raise usage.UsageError("page-size must be positive")
            self.opts['page-size'] = val
