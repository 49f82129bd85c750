"""
incjc exception hierarchy.

Everything raised here means the tool itself (or its environment) broke.
A source tree that fails to compile is reported through ``BuildResult``
instead.
"""


class IncJCError(Exception):
    """Base exception for all incjc failures."""
    pass


class ConfigError(IncJCError):
    """Raised when the configuration file is malformed."""
    pass


class MetaInfoError(IncJCError):
    """Raised when build metadata cannot be initialized, parsed or saved."""
    pass


class StagingError(IncJCError):
    """Raised when copying, deleting or creating build artifacts fails."""
    pass


class SourceDiscoveryError(IncJCError):
    """Raised when the source tree or output directory cannot be scanned."""
    pass


class ToolError(IncJCError):
    """Raised when an external JDK tool cannot be run or reports failure."""
    pass


class ConsistencyError(IncJCError):
    """
    Raised on internal-consistency violations, e.g. a dependency edge
    pointing at a class that has no known source file.
    """
    pass
