"""
Defines the core data types for the vprop runtime.

This module provides the absent-value marker, symbols, plain records,
environments, the Reference type that describes a pending access, the
AST nodes the evaluator walks, and the fault classes raised by the
resolution protocol.
"""

from collections import UserDict
from typing import List, Dict, Any, Optional, Tuple, Union
import collections.abc

# =================================================================
# Faults
# =================================================================

class UnresolvableReference(ReferenceError):
    """A free identifier has no binding (or a strict write targets one)."""
    def __init__(self, message: str, obj: Any = None):
        super().__init__(message)
        self.obj = obj


class InvalidReferenceTarget(TypeError):
    """The base of a reference is null/undefined, or the reference kind is disallowed."""
    def __init__(self, message: str, obj: Any = None):
        super().__init__(message)
        self.obj = obj


class NotInvocable(TypeError):
    """A resolver has no handler for the requested access kind."""
    def __init__(self, message: str, obj: Any = None, kind: Optional[str] = None):
        super().__init__(message)
        self.obj = obj
        self.kind = kind


class StrictWriteFailure(TypeError):
    def __init__(self, message: str, obj: Any = None):
        super().__init__(message)
        self.obj = obj


class StrictDeleteFailure(TypeError):
    def __init__(self, message: str, obj: Any = None):
        super().__init__(message)
        self.obj = obj


# =================================================================
# Primitive values
# =================================================================

class _Undefined:
    """The absent-value marker. There is exactly one instance."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "undefined"

    def __reduce__(self):
        return (_Undefined, ())

undefined = _Undefined()


class Symbol:
    """A unique symbolic token usable as a property name."""
    def __init__(self, description: Optional[str] = None):
        self.description = description

    def __repr__(self) -> str:
        if self.description is None:
            return "Symbol()"
        return f"Symbol({self.description})"

    # Identity semantics: two symbols with the same description are distinct.
    __hash__ = object.__hash__


# Values that name an ordinary slot. Anything else used as a name is a resolver.
PRIMITIVE_NAME_TYPES: Tuple[type, ...] = (str, int, float, bool, type(None), _Undefined, Symbol)


def is_primitive_name(value: Any) -> bool:
    return isinstance(value, PRIMITIVE_NAME_TYPES)


# =================================================================
# Objects
# =================================================================

class Accessor:
    """A getter/setter pair stored as a Record slot.

    Both functions receive the access receiver (this_value) as their first
    argument. A missing setter makes writes to the slot fail.
    """
    def __init__(self, get: Optional[collections.abc.Callable] = None,
                 set: Optional[collections.abc.Callable] = None):
        self.get = get
        self.set = set

    def __repr__(self) -> str:
        kinds = [k for k in ("get", "set") if getattr(self, k) is not None]
        return f"<Accessor {'/'.join(kinds) or 'empty'}>"


class Record(UserDict):
    """A plain script object: string-or-symbol keyed slots with a prototype parent.

    Records hash and compare by identity so they can key associative stores.
    A frozen record rejects every ordinary write and delete.
    """

    def __init__(self, *args, parent: Optional['Record'] = None, **kwargs):
        self.parent = parent
        self.frozen = False
        super().__init__(*args, **kwargs)

    def __hash__(self):
        return id(self)

    def __eq__(self, other):
        return self is other

    def find_owner(self, key: Any) -> Optional['Record']:
        """Finds the Record in the prototype chain (self, then parents) that owns key."""
        cur = self
        while cur is not None:
            if key in cur.data:
                return cur
            cur = cur.parent
        return None

    def freeze(self) -> 'Record':
        self.frozen = True
        return self

    def __getattr__(self, name: str):
        # Attribute-style reads for host code; writes go through the object model.
        if name in ("data", "parent", "frozen") or name.startswith("__"):
            raise AttributeError(name)
        owner = self.find_owner(name)
        if owner is not None:
            return owner.data[name]
        raise AttributeError(name)

    def __repr__(self) -> str:
        from vprop.vprop_printer import Printer
        return Printer().pformat(self)


class Environment:
    """A lexical environment: a table of bindings with an optional parent.

    The root environment (no parent) is the global environment, where
    sloppy-mode writes to unbound identifiers create new bindings.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.bindings: Dict[str, Any] = {}
        self.parent = parent

    def find_owner(self, name: str) -> Optional['Environment']:
        """Finds the Environment in the chain (self, then parents) that binds name."""
        cur = self
        while cur is not None:
            if name in cur.bindings:
                return cur
            cur = cur.parent
        return None

    @property
    def global_env(self) -> 'Environment':
        cur = self
        while cur.parent is not None:
            cur = cur.parent
        return cur

    def lookup(self, name: str) -> Any:
        return self.bindings[name]

    def assign(self, name: str, value: Any) -> None:
        self.bindings[name] = value

    def remove(self, name: str) -> bool:
        if name not in self.bindings:
            return True
        del self.bindings[name]
        return True

    def __contains__(self, name: str) -> bool:
        return self.find_owner(name) is not None

    def __repr__(self) -> str:
        names = ', '.join(self.bindings.keys())
        parent_id = f", parent=#{id(self.parent)}" if self.parent else ""
        return f"<Environment bindings=[{names}]{parent_id}>"


# =================================================================
# References
# =================================================================

class OrdinaryName:
    """A primitive identifier naming a slot on the base."""
    __slots__ = ("key",)

    def __init__(self, key: Any):
        self.key = key

    def __repr__(self) -> str:
        return f"OrdinaryName<{self.key!r}>"


class VirtualResolver:
    """An object whose handlers take over the access."""
    __slots__ = ("resolver",)

    def __init__(self, resolver: Any):
        self.resolver = resolver

    def __repr__(self) -> str:
        return f"VirtualResolver<{type(self.resolver).__name__}>"


class BindingName:
    """An identifier resolved against an environment rather than an object."""
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"BindingName<{self.name!r}>"


AccessedName = Union[OrdinaryName, VirtualResolver, BindingName]


class Reference:
    """An immutable description of one pending read, write, or delete.

    For property references, `base` is the object being accessed; for
    binding references it is the Environment that owns the binding, or
    None when the identifier is unresolvable. The kind of access is
    decided once, here, from the type of the accessed name.
    """
    __slots__ = ("base", "accessed_name", "this_value", "strict", "resolvable", "is_super", "_name")

    def __init__(self, base: Any, accessed_name: Any, *, strict: bool = False,
                 this_value: Any = undefined, binding: bool = False, is_super: bool = False):
        if binding:
            name = BindingName(accessed_name)
            resolvable = base is not None
        elif is_primitive_name(accessed_name):
            name = OrdinaryName(accessed_name)
            resolvable = True
        else:
            name = VirtualResolver(accessed_name)
            resolvable = True
        if not binding and (base is None or base is undefined):
            raise InvalidReferenceTarget(f"cannot access {accessed_name!r} of {base!r}", obj=accessed_name)
        if this_value is undefined:
            this_value = base
        object.__setattr__(self, "base", base)
        object.__setattr__(self, "accessed_name", accessed_name)
        object.__setattr__(self, "this_value", this_value)
        object.__setattr__(self, "strict", bool(strict))
        object.__setattr__(self, "resolvable", resolvable)
        object.__setattr__(self, "is_super", is_super)
        object.__setattr__(self, "_name", name)

    def __setattr__(self, key, value):
        raise AttributeError("Reference is immutable")

    def __delattr__(self, key):
        raise AttributeError("Reference is immutable")

    @property
    def name(self) -> AccessedName:
        """The classified accessed name (OrdinaryName, VirtualResolver, or BindingName)."""
        return self._name

    def is_virtual(self) -> bool:
        return isinstance(self._name, VirtualResolver)

    def is_unresolvable(self) -> bool:
        return not self.resolvable

    def is_strict(self) -> bool:
        return self.strict

    def is_property_reference(self) -> bool:
        return not isinstance(self._name, BindingName)

    def __repr__(self) -> str:
        from vprop.vprop_printer import Printer
        return f"<Reference {Printer().pformat(self)}>"


# =================================================================
# AST nodes
# =================================================================

class Node:
    """Base class for evaluator nodes. `loc` is attached by the transformer when known."""
    loc: Optional[Dict[str, Any]] = None

    _fields: Tuple[str, ...] = ()

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    def __hash__(self):
        return id(self)

    def __repr__(self) -> str:
        args = ', '.join(f"{f}={getattr(self, f)!r}" for f in self._fields)
        return f"{type(self).__name__}({args})"


class Literal(Node):
    _fields = ("value",)

    def __init__(self, value: Any):
        self.value = value


class Identifier(Node):
    """A bare name, e.g. `points`."""
    _fields = ("name",)

    def __init__(self, name: str):
        self.name = name


class Member(Node):
    """A dotted access, e.g. `obj.x`."""
    _fields = ("obj", "name")

    def __init__(self, obj: Node, name: str):
        self.obj = obj
        self.name = name


class Index(Node):
    """A computed access, e.g. `obj[key]`. The key must evaluate to a primitive."""
    _fields = ("obj", "key")

    def __init__(self, obj: Node, key: Node):
        self.obj = obj
        self.key = key


class Chain(Node):
    """The chaining construct `obj :: resolver`."""
    _fields = ("obj", "resolver")

    def __init__(self, obj: Node, resolver: Node):
        self.obj = obj
        self.resolver = resolver


class SuperMember(Node):
    """`super.name`: looked up on the parent of `this`, with `this` as receiver."""
    _fields = ("name",)

    def __init__(self, name: str):
        self.name = name


class Assign(Node):
    _fields = ("target", "value")

    def __init__(self, target: Node, value: Node):
        self.target = target
        self.value = value


class Delete(Node):
    _fields = ("target",)

    def __init__(self, target: Node):
        self.target = target


class Call(Node):
    _fields = ("callee", "args")

    def __init__(self, callee: Node, args: List[Node]):
        self.callee = callee
        self.args = list(args)


class ObjectLiteral(Node):
    """`{x: 1, y: 2}`; evaluates to a fresh Record."""
    _fields = ("entries",)

    def __init__(self, entries: List[Tuple[Any, Node]]):
        self.entries = list(entries)


class Program(Node):
    _fields = ("body", "strict")

    def __init__(self, body: List[Node], strict: bool = False):
        self.body = list(body)
        self.strict = strict


# Node types that evaluate to a Reference rather than a value.
REFERENCE_NODES = (Identifier, Member, Index, Chain, SuperMember)
