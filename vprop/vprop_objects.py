"""
Ordinary property access over Python values.

These are the [[Get]], [[Set]] and [[Delete]] primitives the resolution
engine falls back to when a reference names a slot with a primitive
identifier. Failure is reported, not raised: [[Set]] and [[Delete]] return
False and the engine decides whether strictness turns that into a fault.
"""
import collections.abc
from typing import Any

from vprop.vprop_datatypes import Record, Accessor, Symbol, InvalidReferenceTarget, undefined


class ObjectModel:
    """Handles ordinary named-slot access on records, mappings, sequences and plain objects."""

    def to_object(self, value: Any) -> Any:
        """Coerces a value for use as an access base. Only None and undefined are rejected."""
        if value is None or value is undefined:
            raise InvalidReferenceTarget(f"cannot use {value!r} as an access target", obj=value)
        return value

    # --- [[Get]] ---

    def get(self, base: Any, key: Any, this_value: Any = None) -> Any:
        receiver = base if this_value is None else this_value
        if isinstance(base, Record):
            owner = base.find_owner(key)
            if owner is None:
                return undefined
            slot = owner.data[key]
            if isinstance(slot, Accessor):
                if slot.get is None:
                    return undefined
                return slot.get(receiver)
            return slot
        if isinstance(base, collections.abc.Mapping):
            try:
                return base[key]
            except KeyError:
                return undefined
        if isinstance(key, int) and not isinstance(key, bool) and isinstance(base, collections.abc.Sequence):
            try:
                return base[key]
            except IndexError:
                return undefined
        if not isinstance(key, str):
            return undefined
        return getattr(base, key, undefined)

    # --- [[Set]] ---

    def set(self, base: Any, key: Any, value: Any, this_value: Any = None) -> bool:
        receiver = base if this_value is None else this_value
        if isinstance(base, Record):
            owner = base.find_owner(key)
            if owner is not None:
                slot = owner.data[key]
                if isinstance(slot, Accessor):
                    if slot.set is None:
                        return False
                    slot.set(receiver, value)
                    return True
            target = receiver if isinstance(receiver, Record) else base
            if target.frozen:
                return False
            target.data[key] = value
            return True
        if isinstance(base, collections.abc.MutableMapping):
            base[key] = value
            return True
        if isinstance(base, collections.abc.Mapping):
            return False
        if isinstance(key, int) and not isinstance(key, bool) and isinstance(base, collections.abc.Sequence):
            if not isinstance(base, collections.abc.MutableSequence):
                return False
            try:
                base[key] = value
            except IndexError:
                return False
            return True
        if not isinstance(key, str):
            return False
        try:
            setattr(base, key, value)
        except (AttributeError, TypeError):
            return False
        return True

    # --- [[Delete]] ---

    def delete(self, base: Any, key: Any) -> bool:
        if isinstance(base, Record):
            if key not in base.data:
                return True
            if base.frozen:
                return False
            del base.data[key]
            return True
        if isinstance(base, collections.abc.Mapping):
            if key not in base:
                return True
            if not isinstance(base, collections.abc.MutableMapping):
                return False
            del base[key]
            return True
        if isinstance(key, int) and not isinstance(key, bool) and isinstance(base, collections.abc.Sequence):
            # Sequence slots are positional and never removable by name.
            return not (-len(base) <= key < len(base))
        if not isinstance(key, str) or not hasattr(base, key):
            return True
        try:
            delattr(base, key)
        except (AttributeError, TypeError):
            return False
        return True


def property_key(value: Any) -> Any:
    """Normalizes a computed key; only primitive identifiers may name ordinary slots."""
    if isinstance(value, (str, int, float, bool, Symbol)) or value is None or value is undefined:
        return value
    raise TypeError(f"computed key must be a primitive, not {type(value).__name__}; "
                    "use '::' for object-keyed access")
