#!/usr/bin/python

import codecs
import os
import re

from setuptools import setup


here = os.path.abspath(os.path.dirname(__file__))


def read(*parts):
    with codecs.open(os.path.join(here, *parts), 'r') as f:
        return f.read()


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                              version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


if __name__ == '__main__':
    setup(name="ldapc",
          version=find_version("ldapc", "__init__.py"),
          description="A Twisted command-line LDAP search client",
          long_description="""
ldapc searches an LDAP directory from the command line and prints the
entries it finds as plain text, with

- STARTTLS and/or direct TLS against a configured CA bundle.

- simple bind with a password from the command line, a file descriptor
or a prompt.

- simple paged results, followed until the server is done.
""".strip(),
          author="The ldapc developers",
          license="MIT",
          python_requires=">=3.6",
          packages=[
              "ldapc",
              "ldapc.protocols",
              "ldapc._scripts",
              "ldapc.test",
          ],
          install_requires=[
              "ldaptor",
              "Twisted[tls]",
              "zope.interface",
              "pyOpenSSL<26",
              "service_identity",
          ],
          entry_points={
              "console_scripts": [
                  "ldapc = ldapc._scripts.search:console_script",
              ],
          },
          classifiers=[
              "Environment :: Console",
              "Framework :: Twisted",
              "License :: OSI Approved :: MIT License",
              "Programming Language :: Python :: 3",
              "Topic :: System :: Systems Administration :: Authentication/Directory :: LDAP",
          ],
          )
