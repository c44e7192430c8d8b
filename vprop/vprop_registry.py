"""
The resolver registry: which handlers serve a virtual access.

A resolver supplies up to three handlers, one per access kind. They are
found first on the resolver itself, and then in the registry's table of
handler sets attached to resolver types. Host objects self-attach through
reserved dunder methods; script Records hold their handlers under reserved
Symbols, which no string-keyed slot can name.
"""
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from vprop.vprop_datatypes import Record, Symbol, NotInvocable

GET = "get"
SET = "set"
DELETE = "delete"

# Reserved keys for self-attached handlers.
RESERVED_KEYS: Dict[str, str] = {
    GET: "__vget__",
    SET: "__vset__",
    DELETE: "__vdelete__",
}

VGET = Symbol("vget")
VSET = Symbol("vset")
VDELETE = Symbol("vdelete")

RESERVED_SYMBOLS: Dict[str, Symbol] = {
    GET: VGET,
    SET: VSET,
    DELETE: VDELETE,
}

_ARITY_HINT = {
    GET: "(base)",
    SET: "(base, value)",
    DELETE: "(base)",
}


def _class_handler(obj: Any, key: str) -> Optional[Callable]:
    fn = getattr(type(obj), key, None)
    if fn is not None and hasattr(fn, "__get__"):
        fn = fn.__get__(obj, type(obj))
    return fn


class HandlerSet(NamedTuple):
    """Handlers attached to a resolver type. Each receives the resolver, then the access arguments."""
    on_get: Optional[Callable] = None
    on_set: Optional[Callable] = None
    on_delete: Optional[Callable] = None

    def for_kind(self, kind: str) -> Optional[Callable]:
        return getattr(self, f"on_{kind}")


class ResolverRegistry:
    """Maps resolver types to handler sets.

    Lookup goes through registrations newest first with isinstance checks,
    so abstract types such as collections.abc.Callable can be targets and a
    later registration overrides an earlier one for the same objects.
    """

    def __init__(self):
        self._table: List[Tuple[type, HandlerSet]] = []

    def attach_handlers(self, target_type: type, *, on_get: Optional[Callable] = None,
                        on_set: Optional[Callable] = None,
                        on_delete: Optional[Callable] = None) -> HandlerSet:
        """Registers handlers for instances of target_type and returns the stored set."""
        if not isinstance(target_type, type):
            raise TypeError(f"attach_handlers expects a type, not {type(target_type).__name__}")
        for fn in (on_get, on_set, on_delete):
            if fn is not None and not callable(fn):
                raise TypeError(f"handler must be callable, not {type(fn).__name__}")
        handlers = HandlerSet(on_get, on_set, on_delete)
        # Re-attaching to the same type replaces the previous set in place.
        self._table = [(t, h) for (t, h) in self._table if t is not target_type]
        self._table.append((target_type, handlers))
        return handlers

    def detach_handlers(self, target_type: type) -> bool:
        before = len(self._table)
        self._table = [(t, h) for (t, h) in self._table if t is not target_type]
        return len(self._table) != before

    def registered_types(self) -> List[type]:
        return [t for t, _ in self._table]

    def lookup_type(self, resolver: Any) -> Optional[HandlerSet]:
        for target_type, handlers in reversed(self._table):
            if isinstance(resolver, target_type):
                return handlers
        return None

    def self_attached(self, resolver: Any, kind: str) -> Optional[Callable]:
        """Returns the resolver's own handler for kind, bound to the resolver, if it has one."""
        key = RESERVED_KEYS[kind]
        if isinstance(resolver, Record):
            symbol = RESERVED_SYMBOLS[kind]
            owner = resolver.find_owner(symbol)
            if owner is not None:
                fn, key = owner.data[symbol], repr(symbol)
            else:
                fn = _class_handler(resolver, key)
        elif isinstance(resolver, type):
            # A class's own handlers serve its instances, not the class itself.
            fn = _class_handler(resolver, key)
        else:
            fn = getattr(resolver, key, None)
        if fn is None:
            return None
        if not callable(fn):
            raise NotInvocable(
                f"{type(resolver).__name__}.{key} is not callable",
                obj=resolver, kind=kind)
        return fn

    def find_handler(self, resolver: Any, kind: str) -> Tuple[Callable, str]:
        """Resolves the callable serving a virtual access of the given kind.

        Returns (handler, source) where handler takes only the access
        arguments and source is 'self' or 'registry'. Raises NotInvocable
        when neither the resolver nor the registry supplies one.
        """
        own = self.self_attached(resolver, kind)
        if own is not None:
            return own, "self"
        handlers = self.lookup_type(resolver)
        fn = handlers.for_kind(kind) if handlers is not None else None
        if fn is not None:
            return (lambda *args: fn(resolver, *args)), "registry"
        raise NotInvocable(
            f"{type(resolver).__name__} object is not invocable for {kind} {_ARITY_HINT[kind]}",
            obj=resolver, kind=kind)

    def copy(self) -> 'ResolverRegistry':
        clone = ResolverRegistry()
        clone._table = list(self._table)
        return clone

    def __repr__(self) -> str:
        names = ', '.join(t.__name__ for t, _ in self._table)
        return f"<ResolverRegistry [{names}]>"
