"""
Errors raised by the permissions feature.
"""


class ConfigurationError(Exception):
    """
    Static authorization data is inconsistent (unregistered role, token outside
    the catalog, malformed rule table).

    Raised only while tables are built and validated at import/startup time.
    Checks made at request time never raise it; they deny instead.
    """
