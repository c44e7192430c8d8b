"""
Built-in resolver extensions.

Two archetypal resolver shapes work without any handler authoring:

  - callables: reading `v :: f` yields `f` with `v` fixed as its receiver;
  - associative stores (`Store`, `WeakStore`): `v :: m` reads, writes and
    deletes the entry keyed by `v`.
"""
import collections.abc
import weakref
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from vprop.vprop_datatypes import undefined, is_primitive_name
from vprop.vprop_registry import ResolverRegistry


# =================================================================
# Callable resolver
# =================================================================

class BoundFunction:
    """A callable with its receiver fixed; the receiver is passed as the first argument.

    Binding is permanent: re-binding a BoundFunction to another receiver
    produces a fresh BoundFunction with the original receiver.
    """
    __slots__ = ("target", "receiver", "__weakref__")

    def __init__(self, target: collections.abc.Callable, receiver: Any):
        self.target = target
        self.receiver = receiver

    def __call__(self, *args, **kwargs):
        return self.target(self.receiver, *args, **kwargs)

    def __repr__(self) -> str:
        name = getattr(self.target, "__name__", type(self.target).__name__)
        return f"<BoundFunction {name} receiver={type(self.receiver).__name__}>"


def bind_get(fn: collections.abc.Callable, base: Any) -> BoundFunction:
    if isinstance(fn, BoundFunction):
        return BoundFunction(fn.target, fn.receiver)
    return BoundFunction(fn, base)


# =================================================================
# Associative stores
# =================================================================

def _store_key(key: Any) -> Tuple[Any, ...]:
    # Primitives key by value (type included so 1 and True stay distinct); objects by identity.
    if is_primitive_name(key):
        return ("value", type(key), key)
    return ("id", id(key))


class Store(collections.abc.Collection):
    """A strong key/value store. Object keys compare by identity, primitives by value."""

    def __init__(self, entries: Optional[Iterable[Sequence[Any]]] = None):
        self._data: Dict[Tuple[Any, ...], Tuple[Any, Any]] = {}
        for key, value in (entries or ()):
            self.set(key, value)

    def get(self, key: Any, default: Any = undefined) -> Any:
        entry = self._data.get(_store_key(key))
        return default if entry is None else entry[1]

    def set(self, key: Any, value: Any) -> 'Store':
        # The key object is held alongside the value so its id stays unique.
        self._data[_store_key(key)] = (key, value)
        return self

    def has(self, key: Any) -> bool:
        return _store_key(key) in self._data

    def delete(self, key: Any) -> bool:
        return self._data.pop(_store_key(key), None) is not None

    def clear(self) -> None:
        self._data.clear()

    @property
    def size(self) -> int:
        return len(self._data)

    def keys(self) -> Iterator[Any]:
        return (k for k, _ in self._data.values())

    def values(self) -> Iterator[Any]:
        return (v for _, v in self._data.values())

    def items(self) -> Iterator[Tuple[Any, Any]]:
        return iter(list(self._data.values()))

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self.keys()))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"<Store size={len(self)}>"


class WeakStore:
    """A weak-keyed store: entries vanish when their key object is collected.

    Keys must be weak-referenceable objects; primitives are rejected.
    """

    def __init__(self, entries: Optional[Iterable[Sequence[Any]]] = None):
        self._data: Dict[int, Tuple[weakref.ref, Any]] = {}
        for key, value in (entries or ()):
            self.set(key, value)

    def _ref(self, key: Any) -> weakref.ref:
        if is_primitive_name(key):
            raise TypeError(f"invalid value used as weak store key: {key!r}")
        ident = id(key)
        data = self._data

        def _drop(_ref, ident=ident):
            entry = data.get(ident)
            if entry is not None and entry[0] is _ref:
                del data[ident]
        try:
            return weakref.ref(key, _drop)
        except TypeError:
            raise TypeError(f"invalid value used as weak store key: {type(key).__name__} "
                            "does not support weak references") from None

    def _entry(self, key: Any) -> Optional[Tuple[weakref.ref, Any]]:
        if is_primitive_name(key):
            return None
        entry = self._data.get(id(key))
        if entry is None or entry[0]() is not key:
            return None
        return entry

    def get(self, key: Any, default: Any = undefined) -> Any:
        entry = self._entry(key)
        return default if entry is None else entry[1]

    def set(self, key: Any, value: Any) -> 'WeakStore':
        entry = self._entry(key)
        ref = entry[0] if entry is not None else self._ref(key)
        self._data[id(key)] = (ref, value)
        return self

    def has(self, key: Any) -> bool:
        return self._entry(key) is not None

    def delete(self, key: Any) -> bool:
        if self._entry(key) is None:
            return False
        del self._data[id(key)]
        return True

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return sum(1 for ref, _ in self._data.values() if ref() is not None)

    def __repr__(self) -> str:
        return f"<WeakStore size={len(self)}>"


def store_get(store, base):
    return store.get(base)


def store_set(store, base, value):
    store.set(base, value)


def store_delete(store, base):
    return store.delete(base)


# =================================================================
# Registration
# =================================================================

BUILTIN_EXTENSIONS = ("callable", "store", "weak-store")


def install_builtins(registry: ResolverRegistry, names: Iterable[str] = BUILTIN_EXTENSIONS) -> ResolverRegistry:
    """Attaches the built-in handler sets to registry. Called once per engine."""
    for name in names:
        match name:
            case "callable":
                registry.attach_handlers(collections.abc.Callable, on_get=bind_get)
            case "store":
                registry.attach_handlers(Store, on_get=store_get, on_set=store_set, on_delete=store_delete)
            case "weak-store":
                registry.attach_handlers(WeakStore, on_get=store_get, on_set=store_set, on_delete=store_delete)
            case _:
                raise ValueError(f"unknown built-in extension: {name!r}")
    return registry


def default_registry() -> ResolverRegistry:
    return install_builtins(ResolverRegistry())
