"""A Twisted command-line LDAP search client"""
__version__ = "1.0.0"

__title__ = "ldapc"
__description__ = "A Twisted command-line LDAP search client"
__uri__ = "https://github.com/ldapc/ldapc"

__license__ = "MIT"
__author__ = "The ldapc developers"
__copyright__ = "Copyright (c) 2018-2026 {}".format(__author__)
