"""
Exceptions raised by the declaration model and the renderer.

Only construction problems are ever reported through these classes. Failures of the output sink propagate as whatever
the sink raised, and ambiguous names are never an error (they just get printed fully qualified).
"""


class CodegenError(Exception):
    """Base class for all errors raised by this package."""


class ConstructionError(CodegenError, ValueError):
    """
    Raised when a template fragment or declaration is malformed, e.g. the number of arguments does not match the
    placeholders in a format string, or a control flow block is closed without having been opened.

    These errors are always detected before any rendering takes place.
    """


class LazyInitializationError(ConstructionError):
    """
    Raised when a declaration node fails to populate itself from its builder on first use.

    The underlying failure is available as `__cause__`. Once a node has failed, every later access raises this error
    again; the builder is not consulted a second time.
    """
    node_type: str

    def __init__(self, message: str, node_type: str):
        super().__init__(message)
        self.node_type = node_type
