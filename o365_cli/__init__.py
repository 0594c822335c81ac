"""
o365-cli
========
Command-line administration for SharePoint Online.
Commands translate options into REST and CSOM (ProcessQuery) calls and
report success or a single error message.
"""

__version__ = "1.0.0"
