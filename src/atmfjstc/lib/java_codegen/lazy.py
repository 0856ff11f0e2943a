"""
Deferred, one-time construction for declaration nodes.

Declarations are assembled using mutable builders (one per node). Calling `build()` on a builder does not copy its
contents right away. Instead, it returns a node that holds on to the builder and only converts it into an immutable
snapshot (an `ASTNode`) the first time any of its fields is needed. From then on, the node is a plain immutable value:

- Reading a field (``type_spec.name``, ``method.parameters`` etc.) triggers the conversion and then reads the field from
  the snapshot
- Two nodes compare equal (and hash the same) if their snapshots do, so nodes built from equal specifications are
  interchangeable
- Structural validation is done during the conversion, so a badly assembled declaration fails at the moment it is
  first used, with a `LazyInitializationError`

The conversion is guarded by a per-node lock, so a node may be shared between threads even before it was first used.
"""

import logging
import threading

from abc import ABCMeta, abstractmethod
from typing import Any, Optional

from atmfjstc.lib.ast import ASTNode
from atmfjstc.lib.error_utils import format_exception_head

from atmfjstc.lib.java_codegen.errors import LazyInitializationError


LOG = logging.getLogger(__name__)


class LazyNode(metaclass=ABCMeta):
    """
    Base class for declaration nodes that are populated from their builder on first use. See module doc for details.
    """
    _builder: Any = None
    _data: Optional[ASTNode] = None
    _error: Optional[BaseException] = None

    def __init__(self, builder: Any):
        self._builder = builder
        self._lock = threading.Lock()

    @abstractmethod
    def _materialize(self, builder: Any) -> ASTNode:
        """
        Validates the builder contents and converts them into an immutable snapshot. Called at most once per node.
        """
        raise NotImplementedError

    def ensure_initialized(self) -> ASTNode:
        """
        Returns the immutable snapshot of this node, creating it if this is the first use.

        Raises:
            LazyInitializationError: if the builder contents could not be converted (now or on a previous access)
        """
        data = self._data
        if data is not None:
            return data

        with self._lock:
            if self._data is not None:
                return self._data

            if self._error is not None:
                raise self._make_error(self._error) from self._error

            try:
                self._data = self._materialize(self._builder)
            except Exception as e:
                LOG.error("Failed to initialize %s", self.__class__.__name__, exc_info=True)
                self._error = e
                raise self._make_error(e) from e
            finally:
                self._builder = None

            LOG.debug("Initialized %s", self.__class__.__name__)

            return self._data

    @property
    def is_initialized(self) -> bool:
        return self._data is not None

    def _make_error(self, cause: BaseException) -> LazyInitializationError:
        return LazyInitializationError(
            f"Error initializing {self.__class__.__name__}: {format_exception_head(cause)}",
            self.__class__.__name__
        )

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)

        return getattr(self.ensure_initialized(), name)

    def __eq__(self, other):
        if not isinstance(other, LazyNode):
            return NotImplemented
        if other.__class__ != self.__class__:
            return False

        return self.ensure_initialized() == other.ensure_initialized()

    def __hash__(self):
        return hash((self.__class__.__name__, self.ensure_initialized()))

    def __repr__(self):
        if self._error is not None:
            return f"<{self.__class__.__name__} (failed)>"

        return repr(self.ensure_initialized())
