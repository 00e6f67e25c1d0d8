"""
Async client for CONTENTdm digital collection servers.
"""

__version__ = "0.3.0"
