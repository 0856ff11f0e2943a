"""
Name resolution: deciding how each qualified name referenced in a file should be spelled.

Rendering a file is done in two passes over the same declaration tree:

1. The *collection* pass runs the whole rendering against a null sink, with a `SymbolResolver` in collecting mode.
   Every qualified name that cannot be spelled briefly thanks to the enclosing declarations is *suggested* for binding:
   its top-level class claims its simple name, unless an earlier reference already claimed it. The result is a
   `BindingTable` (i.e. the imports of the file).
2. The *emission* pass renders the tree for real, with a resolver that uses the table from the first pass.

The spelling of a name is decided as follows:

- The name and its enclosing classes are tried from the innermost outwards. For each, the simple name is resolved by
  looking at the types nested in the enclosing declarations (innermost first), at the enclosing declarations
  themselves, at the top-level types declared in the file, and finally at the binding table. If it resolves to
  exactly that class, the name is printed from there on, e.g. ``Outer.Inner`` when ``Outer`` is visible.
- If the simple name of the top-level class resolves to some *other* class, the name is shadowed and must be printed
  fully qualified.
- Otherwise, classes in the file's own package are printed without their package (and claim their simple name), and
  all others are printed fully qualified (and, while collecting, suggested for binding).

Names in the default package are never bound (they cannot be imported), and neither are names referenced from inside
doc comments.
"""

import logging

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from atmfjstc.lib.java_codegen.ast.names import QualifiedName


LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeFrame:
    """
    The context of a type declaration that is currently being emitted.

    Attributes:
        name: The qualified name of the declared type, or None for an anonymous type
        nested_names: The simple names of the types declared directly inside this one
    """
    name: Optional[QualifiedName]
    nested_names: FrozenSet[str] = frozenset()

    def resolve(self, simple_name: str) -> Optional[QualifiedName]:
        if self.name is None:
            return None
        if simple_name in self.nested_names:
            return self.name.nested(simple_name)
        if self.name.simple_name == simple_name:
            return self.name

        return None


class BindingTable(Mapping[str, QualifiedName]):
    """
    An immutable mapping from simple names to the top-level classes they stand for in a file.
    """

    _bindings: Dict[str, QualifiedName]

    def __init__(self, bindings: Optional[Mapping[str, QualifiedName]] = None):
        self._bindings = dict(bindings or dict())

        for simple_name, name in self._bindings.items():
            if name.enclosing_name() is not None:
                raise ValueError(f"Only top-level classes can be bound, got {name.canonical_name}")
            if name.simple_name != simple_name:
                raise ValueError(f"Cannot bind {simple_name!r} to {name.canonical_name}")

    def __getitem__(self, simple_name: str) -> QualifiedName:
        return self._bindings[simple_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self):
        return 'BindingTable({})'.format(', '.join(name.canonical_name for name in self._bindings.values()))

    def imports_for(self, package_name: str) -> List[QualifiedName]:
        """
        Returns the names that need an import statement in a file of the given package, sorted by canonical name.
        """
        return sorted(
            name for name in self._bindings.values()
            if name.package_name != '' and name.package_name != package_name
        )


EMPTY_BINDINGS = BindingTable()


class SymbolResolver:
    """
    Keeps track of the scope stack during rendering and decides how qualified names are spelled. See module doc for
    details.
    """

    _package_name: str
    _bindings: BindingTable
    _collecting: bool
    _trace: bool

    _declared_names: FrozenSet[str]
    _scopes: List[ScopeFrame]
    _suggested: Dict[str, QualifiedName]

    def __init__(
        self, package_name: str = '', bindings: Optional[BindingTable] = None, collecting: bool = False,
        trace: bool = False, declared_names: Iterable[str] = ()
    ):
        """
        Args:
            package_name: The package of the file being rendered
            bindings: The binding table to spell names by (for the emission pass)
            collecting: Whether names should be suggested for binding (for the collection pass)
            trace: Log every resolution decision at DEBUG level
            declared_names: The simple names of the top-level types declared in the file. These always refer to the
                declared types, even outside their bodies, and can never be bound to anything else.
        """
        self._package_name = package_name
        self._bindings = bindings if bindings is not None else EMPTY_BINDINGS
        self._collecting = collecting
        self._trace = trace
        self._declared_names = frozenset(declared_names)
        self._scopes = []
        self._suggested = dict()

    @property
    def package_name(self) -> str:
        return self._package_name

    @property
    def bindings(self) -> BindingTable:
        return self._bindings

    @property
    def scopes(self) -> Tuple[ScopeFrame, ...]:
        return tuple(self._scopes)

    def frame_for(self, type_name: Optional[str], nested_names: Iterable[str]) -> ScopeFrame:
        """
        Makes the frame for a type declared inside the current scope (or at the top level, if the stack is empty).
        """
        if type_name is None:
            return ScopeFrame(None)

        enclosing = next((frame.name for frame in reversed(self._scopes) if frame.name is not None), None)
        if enclosing is None and len(self._scopes) > 0:
            # Named types inside anonymous ones cannot be referred to from outside
            return ScopeFrame(None)

        name = enclosing.nested(type_name) if enclosing is not None else QualifiedName.of(self._package_name, type_name)

        return ScopeFrame(name, frozenset(nested_names))

    def push_scope(self, frame: ScopeFrame):
        self._scopes.append(frame)

    def pop_scope(self) -> ScopeFrame:
        return self._scopes.pop()

    def lookup_name(self, name: QualifiedName, suggest: bool = True) -> str:
        """
        Returns the shortest spelling of `name` that is unambiguous at the current point.

        Args:
            name: The name to spell
            suggest: Whether this reference may cause a binding to be suggested (if collecting). Doc comment
                references are spelled the same way, but never cause a binding on their own.
        """
        spelling = self._lookup_name(name, suggest)

        if self._trace:
            LOG.debug("Resolved %s as %r", name.canonical_name, spelling)

        return spelling

    def _lookup_name(self, name, suggest):
        name_resolved = False

        candidate = name
        while candidate is not None:
            resolved = self._resolve(candidate.simple_name)
            name_resolved = resolved is not None

            if name_resolved and resolved == candidate:
                suffix_offset = len(candidate.simple_names) - 1
                return '.'.join(name.simple_names[suffix_offset:])

            candidate = candidate.enclosing_name()

        # The top-level name resolved to something else, so it is shadowed
        if name_resolved:
            return name.canonical_name

        if name.package_name == self._package_name:
            if self._collecting and suggest:
                self._suggest(name)
            return '.'.join(name.simple_names)

        if self._collecting and suggest:
            self._suggest(name)

        return name.canonical_name

    def _resolve(self, simple_name):
        for frame in reversed(self._scopes):
            resolved = frame.resolve(simple_name)
            if resolved is not None:
                return resolved

        if simple_name in self._declared_names:
            return QualifiedName.of(self._package_name, simple_name)

        return self._bindings.get(simple_name)

    def _suggest(self, name):
        if name.package_name == '':
            return

        top_level = name.top_level_name()
        self._suggested.setdefault(top_level.simple_name, top_level)

    def binding_table(self) -> BindingTable:
        """Returns the table of the bindings suggested so far (first suggestion for each simple name wins)"""
        return BindingTable(self._suggested)
