"""
The resolution engine: carries out a Reference as a read, write, or delete.

Every access takes one of three routes, fixed when the Reference was
built: a binding in an Environment, an ordinary slot on an object, or a
virtual access handed to the resolver's handler. Handler results and
faults pass through untouched.
"""
import os
import sys
from typing import Any, Optional

from vprop.vprop_datatypes import (
    Reference, Environment, OrdinaryName, VirtualResolver, BindingName,
    UnresolvableReference, InvalidReferenceTarget, StrictWriteFailure, StrictDeleteFailure,
)
from vprop.vprop_objects import ObjectModel
from vprop.vprop_registry import ResolverRegistry, GET, SET, DELETE
from vprop.vprop_builtins import default_registry
from vprop.vprop_config import env_flag


class ResolutionEngine:
    """Dispatches References to bindings, ordinary slots, or resolver handlers."""

    def __init__(self, registry: Optional[ResolverRegistry] = None,
                 object_model: Optional[ObjectModel] = None,
                 global_env: Optional[Environment] = None,
                 debug: Optional[bool] = None):
        self.registry = registry if registry is not None else default_registry()
        self.objects = object_model if object_model is not None else ObjectModel()
        self.global_env = global_env if global_env is not None else Environment()
        self.debug = debug

    def _dbg(self, *parts):
        enabled = self.debug if self.debug is not None else env_flag("VPROP_DEBUG", os.environ.get("VPROP_DEBUG", ""))
        if enabled:
            print("[DBG]", *parts, file=sys.stderr)

    # --- Construction ---

    def construct_virtual_reference(self, base: Any, resolver: Any, strict: bool = False) -> Reference:
        """Builds the Reference for `base :: resolver`."""
        base = self.objects.to_object(base)
        ref = Reference(base, resolver, strict=strict)
        if not ref.is_virtual():
            # A primitive on the right of '::' is still an ordinary access.
            self._dbg("construct", "primitive resolver", repr(resolver), "-> ordinary")
        return ref

    def reference_for_binding(self, env: Environment, name: str, strict: bool = False) -> Reference:
        owner = env.find_owner(name)
        return Reference(owner, name, strict=strict, binding=True)

    # --- Read ---

    def read(self, ref: Reference) -> Any:
        match ref.name:
            case BindingName(name=name):
                if ref.is_unresolvable():
                    raise UnresolvableReference(f"{name} is not defined", obj=ref)
                self._dbg("read", "binding", name)
                return ref.base.lookup(name)
            case OrdinaryName(key=key):
                self._dbg("read", "ordinary", repr(key))
                return self.objects.get(ref.base, key, ref.this_value)
            case VirtualResolver(resolver=resolver):
                handler, source = self.registry.find_handler(resolver, GET)
                self._dbg("read", "virtual", type(resolver).__name__, "via", source)
                return handler(ref.base)

    # --- Write ---

    def write(self, ref: Reference, value: Any) -> None:
        match ref.name:
            case BindingName(name=name):
                if ref.is_unresolvable():
                    if ref.is_strict():
                        raise UnresolvableReference(f"{name} is not defined", obj=ref)
                    self._dbg("write", "binding", name, "-> new global")
                    self.global_env.assign(name, value)
                    return
                self._dbg("write", "binding", name)
                ref.base.assign(name, value)
            case OrdinaryName(key=key):
                self._dbg("write", "ordinary", repr(key))
                ok = self.objects.set(ref.base, key, value, ref.this_value)
                if not ok and ref.is_strict():
                    raise StrictWriteFailure(
                        f"cannot assign to {key!r} of {type(ref.base).__name__}", obj=ref)
            case VirtualResolver(resolver=resolver):
                handler, source = self.registry.find_handler(resolver, SET)
                self._dbg("write", "virtual", type(resolver).__name__, "via", source)
                handler(ref.base, value)

    # --- Delete ---

    def delete(self, ref: Reference) -> bool:
        if ref.is_super:
            raise InvalidReferenceTarget("cannot delete a super reference", obj=ref)
        match ref.name:
            case BindingName(name=name):
                if ref.is_unresolvable():
                    return True
                self._dbg("delete", "binding", name)
                return ref.base.remove(name)
            case OrdinaryName(key=key):
                self._dbg("delete", "ordinary", repr(key))
                ok = self.objects.delete(ref.base, key)
                if not ok and ref.is_strict():
                    raise StrictDeleteFailure(
                        f"cannot delete {key!r} of {type(ref.base).__name__}", obj=ref)
                return ok
            case VirtualResolver(resolver=resolver):
                handler, source = self.registry.find_handler(resolver, DELETE)
                self._dbg("delete", "virtual", type(resolver).__name__, "via", source)
                handler(ref.base)
                return True
