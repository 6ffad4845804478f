"""LDAP client protocol, connection and TLS helpers."""
