"""Plain text rendering of search result entries."""

from zope.interface import implementer

from ldapc import interfaces


def _text(value):
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value


@implementer(interfaces.IEntryWriter)
class EntryWriter:
    """
    Write entries as C{dn: ...} followed by one C{name: value} line per
    attribute value, with a blank line between entries.

    The dn line of the first entry is left out when it is the search base
    itself.
    """

    def __init__(self, out, baseDN=""):
        self.out = out
        self.baseDN = _text(baseDN)
        self.written = 0

    def writeEntry(self, dn, attributes):
        dn = _text(dn)
        if self.written:
            self.out.write("\n")
        if self.written or dn != self.baseDN:
            self.out.write("dn: %s\n" % (dn,))
        for name, values in attributes:
            name = _text(name)
            for value in values:
                self.out.write("%s: %s\n" % (name, _text(value)))
        self.written += 1
