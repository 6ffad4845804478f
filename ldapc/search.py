"""Search requests and the paged search loop."""

from twisted.internet import defer
from twisted.python import log

from ldaptor import ldapfilter
from ldaptor.protocols import pureber, pureldap

from ldapc import errors, resultcodes

DEFAULT_FILTER = "(objectClass=*)"

_scopeSynonyms = {
    "base": pureldap.LDAP_SCOPE_baseObject,
    "baseobject": pureldap.LDAP_SCOPE_baseObject,
    "one": pureldap.LDAP_SCOPE_singleLevel,
    "single": pureldap.LDAP_SCOPE_singleLevel,
    "singlelevel": pureldap.LDAP_SCOPE_singleLevel,
    "sub": pureldap.LDAP_SCOPE_wholeSubtree,
    "subtree": pureldap.LDAP_SCOPE_wholeSubtree,
    "wholesubtree": pureldap.LDAP_SCOPE_wholeSubtree,
}

_scopes = (
    pureldap.LDAP_SCOPE_baseObject,
    pureldap.LDAP_SCOPE_singleLevel,
    pureldap.LDAP_SCOPE_wholeSubtree,
)


def scopeFromName(scope):
    """
    Normalize a scope given by name (C{base}, C{one}, C{sub} or one of
    their long forms, any case) or by its pureldap value.

    @raise ValueError: for anything else
    """
    if isinstance(scope, int):
        if scope in _scopes:
            return scope
    else:
        try:
            return _scopeSynonyms[scope.lower()]
        except KeyError:
            pass
    raise ValueError("invalid scope: %s" % (scope,))


class SearchRequest:
    """
    What to search for. The filter is parsed here so that a bad filter is
    reported before anything is sent to the server.
    """

    def __init__(self, baseDN="", scope=pureldap.LDAP_SCOPE_wholeSubtree,
                 filterText=DEFAULT_FILTER, attributes=None):
        self.baseDN = baseDN
        self.scope = scopeFromName(scope)
        self.filterText = filterText
        try:
            self.filter = ldapfilter.parseFilter(filterText)
        except ldapfilter.InvalidLDAPFilter as e:
            raise ValueError(str(e))
        self.attributes = tuple(attributes or ())

    def toOperation(self):
        return pureldap.LDAPSearchRequest(
            baseObject=self.baseDN,
            scope=self.scope,
            filter=self.filter,
            attributes=list(self.attributes),
        )

    def __repr__(self):
        return "%s(baseDN=%r, scope=%d, filterText=%r, attributes=%r)" % (
            self.__class__.__name__,
            self.baseDN,
            self.scope,
            self.filterText,
            self.attributes,
        )


class PageControl:
    """The simple paged results control of RFC 2696."""

    oid = b"1.2.840.113556.1.4.319"

    def __init__(self, size=0, cookie=b""):
        self.size = size
        self.cookie = cookie

    @classmethod
    def fromControls(klass, controls):
        """
        Find the paged results control in the controls of a response.

        @param controls: (controlType, criticality, controlValue) tuples,
            or None
        @return: a L{PageControl}, or None when the server sent no control
            or an empty cookie.
        """
        for controlType, criticality, controlValue in controls or ():
            if isinstance(controlType, str):
                controlType = controlType.encode("ascii")
            if controlType != klass.oid:
                continue
            if not controlValue:
                raise errors.ProtocolError("paged results control without a value")
            try:
                seq, _ = pureber.berDecodeObject(
                    pureber.BERDecoderContext(), controlValue
                )
                size, cookie = seq[0].value, seq[1].value
            except (pureber.BERExceptionInsufficientData, IndexError,
                    AttributeError, TypeError) as e:
                raise errors.ProtocolError("malformed paged results control: %s" % (e,))
            if not cookie:
                return None
            return klass(size, cookie)
        return None

    def toControl(self, criticality=None):
        value = pureber.BERSequence(
            [
                pureber.BERInteger(self.size),
                pureber.BEROctetString(self.cookie),
            ]
        )
        return (self.oid, criticality, value.toWire())

    def __repr__(self):
        return "%s(size=%d, cookie=%r)" % (
            self.__class__.__name__, self.size, self.cookie)


IDLE = "Idle"
REQUEST_SENT = "RequestSent"
STREAMING = "Streaming"
PAGE_COMPLETE = "PageComplete"
DONE = "Done"
FAILED = "Failed"


class PagedSearch:
    """
    Run one search, following paged results cookies until the server
    stops returning one.

    There is no limit on the number of pages; a server that keeps
    returning cookies keeps the loop going.

    @ivar state: one of L{IDLE}, L{REQUEST_SENT}, L{STREAMING},
        L{PAGE_COMPLETE}, L{DONE} or L{FAILED}
    @ivar requests: number of search requests sent
    @ivar entries: number of entries handed to the writer
    """

    def __init__(self, client, request, writer, pageSize=None):
        self.client = client
        self.request = request
        self.writer = writer
        self.pageSize = pageSize
        self.state = IDLE
        self.requests = 0
        self.entries = 0

    def _sendRequest(self, page):
        controls = None
        if page is not None:
            if self.pageSize is not None:
                page.size = self.pageSize
            controls = [page.toControl()]
        elif self.pageSize is not None:
            controls = [PageControl(self.pageSize).toControl()]
        msgid = self.client.send(self.request.toOperation(), controls=controls)
        self.requests += 1
        self.state = REQUEST_SENT
        log.msg("search page %d" % (self.requests,))
        return msgid

    @defer.inlineCallbacks
    def _readPage(self, msgid):
        self.state = STREAMING
        while True:
            msg = yield self.client.readResponse(msgid)
            op = msg.value
            if isinstance(op, pureldap.LDAPSearchResultEntry):
                if not op.attributes:
                    continue
                self.writer.writeEntry(op.objectName, op.attributes)
                self.entries += 1
            elif isinstance(op, pureldap.LDAPSearchResultDone):
                self.state = PAGE_COMPLETE
                if op.resultCode != resultcodes.SUCCESS:
                    raise errors.SearchError(op.resultCode, op.errorMessage)
                return PageControl.fromControls(msg.controls)
            else:
                raise errors.ProtocolError(
                    "unexpected %s in response to search" % (op.__class__.__name__,)
                )

    @defer.inlineCallbacks
    def run(self):
        """
        @return: a Deferred firing with the number of entries written.
        @raise SearchError: when the server ends a page with a failure
            code; entries already written stay written.
        @raise ProtocolError: on a message that does not belong to the
            search; the connection is closed before this is raised.
        """
        page = None
        try:
            while True:
                msgid = self._sendRequest(page)
                page = yield self._readPage(msgid)
                if page is None:
                    break
        except errors.ProtocolError:
            self.state = FAILED
            yield self.client.close()
            raise
        except errors.LDAPClientError:
            self.state = FAILED
            raise
        self.state = DONE
        return self.entries
