import getpass
import os
import sys

from twisted.internet import defer
from twisted.internet.task import react
from twisted.python import log

from ldapc import config, errors, session, usage
from ldapc.output import EntryWriter
from ldapc.protocols.ldapclient import LDAPClient
from ldapc.search import DEFAULT_FILTER, SearchRequest

EXIT_FAILURE = 1
EXIT_USAGE = 2


class MyOptions(usage.Options, usage.Options_host, usage.Options_base_optional,
                usage.Options_scope, usage.Options_bind, usage.Options_tls,
                usage.Options_paging):
    """ldapc: search an LDAP directory"""

    synopsis = (
        "Usage: ldapc [-LvWxZ] [--tls] [-c capath] [-p port] [-b basedn]\n"
        "             [-D binddn] [-w secret|-W] [-s scope] -h host\n"
        "             [filter] [attribute ...]"
    )

    optFlags = (
        ('ldif', 'L', "accepted for compatibility"),
        ('simple', 'x', "accepted for compatibility"),
    )

    def __init__(self):
        usage.Options.__init__(self)
        self.opts['verbose'] = 0

    def opt_verbose(self):
        """Log progress on stderr; twice to log protocol messages too"""
        self.opts['verbose'] += 1

    opt_v = opt_verbose

    def parseArgs(self, *args):
        args = list(args)
        self.opts['filter'] = DEFAULT_FILTER
        if args and '=' in args[0]:
            self.opts['filter'] = args.pop(0)
        self.opts['attributes'] = args

    def postOptions_filter(self):
        try:
            self.opts['request'] = SearchRequest(
                filterText=self.opts['filter'],
                attributes=self.opts['attributes'],
            )
        except ValueError as e:
            raise usage.UsageError(str(e))


def readSecret(opts):
    """Get the bind secret from the options, a file descriptor or the tty."""
    if opts['secret'] is not None:
        return opts['secret']
    if opts['bind-auth-fd'] is not None:
        with os.fdopen(opts['bind-auth-fd'], 'r') as f:
            return f.readline().rstrip('\n')
    if not sys.stdin.isatty():
        raise EOFError("standard input is not a terminal")
    return getpass.getpass("Password: ")


def buildSession(opts, cfg):
    flags = 0
    if opts['starttls']:
        flags |= session.NEEDS_STARTTLS
    if opts['tls']:
        flags |= session.NEEDS_TLS
    if opts['needs-auth']:
        flags |= session.NEEDS_AUTH
    return session.Session(
        host=cfg.getHost(),
        port=cfg.getPort(),
        capath=cfg.getCAPath(),
        binddn=opts['binddn'],
        flags=flags,
    )


@defer.inlineCallbacks
def search(reactor, opts, out=None, **kw):
    """
    Run the search described by C{opts}, printing entries to C{out}.

    Extra keyword arguments are passed on to L{session.run}.

    @return: a Deferred firing with the process exit status.
    """
    if out is None:
        out = sys.stdout
    cfg = config.LDAPConfig(
        host=opts['host'],
        port=opts['port'],
        baseDN=opts['base'],
        capath=opts['capath'],
        scope=opts['scope'],
        pageSize=opts['page-size'],
    )
    try:
        s = buildSession(opts, cfg)
        request = SearchRequest(
            baseDN=cfg.getBaseDN(),
            scope=cfg.getScope(),
            filterText=opts['request'].filterText,
            attributes=opts['request'].attributes,
        )
        pageSize = cfg.getPageSize()
    except (config.MissingHostError, ValueError) as e:
        sys.stderr.write("ldapc: %s\n" % (e,))
        return EXIT_USAGE

    if s.needs(session.NEEDS_AUTH):
        try:
            s.secret = readSecret(opts)
        except (OSError, EOFError) as e:
            sys.stderr.write("ldapc: failed to read LDAP password: %s\n" % (e,))
            return EXIT_FAILURE

    writer = EntryWriter(out, request.baseDN)
    try:
        yield session.run(reactor, s, request, writer, pageSize=pageSize, **kw)
    except errors.LDAPClientError as e:
        sys.stderr.write("ldapc: %s\n" % (e,))
        return EXIT_FAILURE
    return 0


@defer.inlineCallbacks
def main(reactor, *argv):
    try:
        opts = MyOptions()
        opts.parseOptions(argv)
    except usage.UsageError as ue:
        sys.stderr.write("ldapc: %s\n%s\n" % (ue, opts.synopsis))
        raise SystemExit(EXIT_USAGE)

    if opts['verbose']:
        log.startLogging(sys.stderr, setStdout=False)
    if opts['verbose'] > 1:
        LDAPClient.debug = True

    status = yield search(reactor, opts)
    if status:
        raise SystemExit(status)


def console_script():
    react(main, sys.argv[1:])


if __name__ == "__main__":
    console_script()
