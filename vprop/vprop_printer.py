"""
A pretty-printer for vprop values, AST nodes, and References.
"""
import collections.abc

from vprop.vprop_datatypes import (
    Literal, Identifier, Member, Index, Chain, SuperMember,
    Assign, Delete, Call, ObjectLiteral, Program,
    Record, Accessor, Symbol, Environment, Reference,
    OrdinaryName, VirtualResolver, BindingName, undefined,
)


class Printer:
    """Formats vprop objects into readable, source-like strings."""

    def __init__(self, indent_width=2):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, level)

    def _get_handler(self, obj):
        if obj is undefined: return lambda o, l: "undefined"
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, Record): return self._pformat_record
        if isinstance(obj, collections.abc.Mapping): return self._pformat_mapping
        if isinstance(obj, collections.abc.Callable): return self._pformat_callable
        return lambda o, l: repr(o)

    def _create_handlers(self):
        return {
            str: self._pformat_str,
            int: self._pformat_primitive,
            float: self._pformat_primitive,
            bool: self._pformat_bool,
            type(None): self._pformat_none,
            list: self._pformat_list,
            Symbol: lambda o, l: repr(o),
            Accessor: lambda o, l: repr(o),
            Environment: lambda o, l: "<env>",
            Record: self._pformat_record,
            Reference: self._pformat_reference,
            Literal: self._pformat_literal,
            Identifier: lambda o, l: o.name,
            Member: self._pformat_member,
            Index: self._pformat_index,
            Chain: self._pformat_chain,
            SuperMember: lambda o, l: f"super.{o.name}",
            Assign: self._pformat_assign,
            Delete: self._pformat_delete,
            Call: self._pformat_call,
            ObjectLiteral: self._pformat_object_literal,
            Program: self._pformat_program,
        }

    # --- Values ---

    def _pformat_primitive(self, obj, level):
        return str(obj)

    def _pformat_str(self, obj, level):
        escaped = obj.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    def _pformat_bool(self, obj, level):
        return "true" if obj else "false"

    def _pformat_none(self, obj, level):
        return "null"

    def _pformat_list(self, obj, level):
        return "[" + ", ".join(self.pformat(x, level) for x in obj) + "]"

    def _pformat_record(self, obj, level):
        if not obj.data:
            return "{}"
        if level > 2:
            return "{...}"
        parts = [f"{self._key(k)}: {self.pformat(v, level + 1)}" for k, v in obj.data.items()]
        return "{" + ", ".join(parts) + "}"

    def _pformat_mapping(self, obj, level):
        if not obj:
            return "#{}"
        if level > 2:
            return "#{...}"
        parts = [f"{self.pformat(k, level + 1)}: {self.pformat(v, level + 1)}" for k, v in obj.items()]
        return "#{" + ", ".join(parts) + "}"

    def _pformat_callable(self, obj, level):
        name = getattr(obj, "__name__", None)
        return f"<fn {name}>" if name else repr(obj)

    def _key(self, key):
        if isinstance(key, str) and key.isidentifier():
            return key
        return f"[{self.pformat(key)}]"

    # --- References ---

    def _pformat_reference(self, ref, level):
        match ref.name:
            case BindingName(name=name):
                return name if ref.resolvable else f"{name} (unresolvable)"
            case OrdinaryName(key=key):
                base = "super" if ref.is_super else self._short(ref.base)
                if isinstance(key, str) and key.isidentifier():
                    return f"{base}.{key}"
                return f"{base}[{self.pformat(key)}]"
            case VirtualResolver(resolver=resolver):
                return f"{self._short(ref.base)} :: {self._short(resolver)}"

    def _short(self, value):
        if isinstance(value, Record):
            return "{...}" if value.data else "{}"
        if isinstance(value, (str, int, float, bool)) or value is None or value is undefined:
            return self.pformat(value)
        name = getattr(value, "__name__", None)
        if isinstance(name, str):
            return name
        return f"<{type(value).__name__}>"

    # --- Nodes ---

    def _pformat_literal(self, node, level):
        return self.pformat(node.value, level)

    def _pformat_member(self, node, level):
        return f"{self.pformat(node.obj, level)}.{node.name}"

    def _pformat_index(self, node, level):
        return f"{self.pformat(node.obj, level)}[{self.pformat(node.key, level)}]"

    def _pformat_chain(self, node, level):
        return f"{self.pformat(node.obj, level)} :: {self.pformat(node.resolver, level)}"

    def _pformat_assign(self, node, level):
        return f"{self.pformat(node.target, level)} = {self.pformat(node.value, level)}"

    def _pformat_delete(self, node, level):
        return f"delete {self.pformat(node.target, level)}"

    def _pformat_call(self, node, level):
        args = ", ".join(self.pformat(a, level) for a in node.args)
        return f"{self.pformat(node.callee, level)}({args})"

    def _pformat_object_literal(self, node, level):
        parts = [f"{self._key(k)}: {self.pformat(v, level)}" for k, v in node.entries]
        return "{" + ", ".join(parts) + "}"

    def _pformat_program(self, node, level):
        lines = [self._indent_char * level + self.pformat(stmt, level) for stmt in node.body]
        if node.strict:
            lines.insert(0, self._indent_char * level + "'use strict'")
        return "\n".join(lines)
