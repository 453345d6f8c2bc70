"""
Scoped name -> value store used to expand words.

Scopes form a tree: each one owns its local bindings and keeps a reference
to its parent. The global/collection scope is the root, request scopes are
short-lived children created for one execution.
"""

from typing import Dict, Generic, List, Mapping, Optional, TypeVar

from mule.mule_errors import NotDefined

V = TypeVar("V")


class Environment(Generic[V]):
    """A lexical scope with an optional parent.

    Lookups that miss locally continue in the parent chain. Definitions
    always write the local scope, so a child can shadow a parent binding
    without touching it. Assignment updates an existing binding wherever it
    lives and never creates one.
    """
    def __init__(self, parent: Optional['Environment[V]'] = None):
        self.bindings: Dict[str, V] = {}
        self._parent = parent

    @classmethod
    def from_mapping(cls, values: Mapping[str, V], parent: Optional['Environment[V]'] = None) -> 'Environment[V]':
        env = cls(parent)
        for name, value in values.items():
            env.define(name, value)
        return env

    @property
    def parent(self) -> Optional['Environment[V]']:
        return self._parent

    def enclosed(self) -> 'Environment[V]':
        """Returns a new child scope of this one."""
        return type(self)(self)

    def find_owner(self, name: str) -> Optional['Environment[V]']:
        """Finds the scope in the chain (self -> parent -> ...) that binds name."""
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope
            scope = scope._parent
        return None

    def define(self, name: str, value: V) -> None:
        self.bindings[name] = value

    def resolve(self, name: str) -> V:
        owner = self.find_owner(name)
        if owner is None:
            raise NotDefined(name)
        return owner.bindings[name]

    def assign(self, name: str, value: V) -> None:
        owner = self.find_owner(name)
        if owner is None:
            raise NotDefined(name)
        owner.bindings[name] = value

    def identifiers(self) -> List[str]:
        """Names bound in this scope only; ancestors are not flattened."""
        return list(self.bindings.keys())

    def __getitem__(self, name: str) -> V:
        return self.resolve(name)

    def __setitem__(self, name: str, value: V):
        self.define(name, value)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self.find_owner(name) is not None

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        parent_id = f", parent=#{id(self._parent)}" if self._parent else ""
        return f"<Environment bindings=[{keys}]{parent_id}>"
