"""
The vprop evaluator: turns AST nodes into References and values.

Member expressions (`a.b`, `a[k]`, `a :: r`, `super.b`, identifiers)
evaluate to References; the surrounding construct decides what happens
to them. A bare expression reads, an assignment writes, `delete`
deletes. All dispatch is left to the ResolutionEngine.
"""
from typing import Any, List, Optional

from vprop.vprop_datatypes import (
    Node, Literal, Identifier, Member, Index, Chain, SuperMember,
    Assign, Delete, Call, ObjectLiteral, Program, REFERENCE_NODES,
    Reference, Record, Environment, InvalidReferenceTarget, undefined,
)
from vprop.vprop_engine import ResolutionEngine
from vprop.vprop_objects import property_key


class Evaluator:
    """The vprop execution front-end."""

    def __init__(self, engine: Optional[ResolutionEngine] = None, strict: bool = False):
        self.engine = engine if engine is not None else ResolutionEngine()
        self.strict = strict
        self.current_node: Optional[Node] = None

    @property
    def global_env(self) -> Environment:
        return self.engine.global_env

    def _dbg(self, *parts):
        self.engine._dbg(*parts)

    # --- Programs ---

    def run(self, program: Program, env: Optional[Environment] = None) -> Any:
        """Evaluates each statement in order and returns the last value."""
        env = env if env is not None else self.global_env
        saved = self.strict
        self.strict = saved or program.strict
        try:
            result = undefined
            for stmt in program.body:
                result = self.eval(stmt, env)
            return result
        finally:
            self.strict = saved

    # --- Expressions ---

    def eval(self, node: Any, env: Environment) -> Any:
        """Evaluates a node to a value, reading through any Reference it produces."""
        if not isinstance(node, Node):
            return node
        self.current_node = node
        match node:
            case Literal():
                return node.value
            case Identifier() | Member() | Index() | Chain() | SuperMember():
                ref = self.eval_reference(node, env)
                self.current_node = node
                return self.engine.read(ref)
            case Assign():
                return self._eval_assign(node, env)
            case Delete():
                return self._eval_delete(node, env)
            case Call():
                return self._eval_call(node, env)
            case ObjectLiteral():
                record = Record()
                for key, value_node in node.entries:
                    record.data[property_key(key)] = self.eval(value_node, env)
                return record
            case Program():
                return self.run(node, env)
            case _:
                raise TypeError(f"cannot evaluate node {type(node).__name__}")

    def eval_reference(self, node: Node, env: Environment) -> Reference:
        """Evaluates a member-access node to a fresh Reference without dispatching it."""
        match node:
            case Identifier(name=name):
                return self.engine.reference_for_binding(env, name, self.strict)
            case Member(obj=obj, name=name):
                base = self.engine.objects.to_object(self.eval(obj, env))
                return Reference(base, name, strict=self.strict)
            case Index(obj=obj, key=key):
                base = self.engine.objects.to_object(self.eval(obj, env))
                return Reference(base, property_key(self.eval(key, env)), strict=self.strict)
            case Chain(obj=obj, resolver=resolver):
                base = self.eval(obj, env)
                resolver_value = self.eval(resolver, env)
                return self.engine.construct_virtual_reference(base, resolver_value, self.strict)
            case SuperMember(name=name):
                this = self.engine.read(self.engine.reference_for_binding(env, "this", self.strict))
                home = getattr(this, "parent", None) if isinstance(this, Record) else None
                if home is None:
                    raise InvalidReferenceTarget(f"super.{name} has no parent object", obj=node)
                return Reference(home, name, strict=self.strict, this_value=this, is_super=True)
            case _:
                raise TypeError(f"{type(node).__name__} is not a valid reference target")

    def _eval_assign(self, node: Assign, env: Environment) -> Any:
        if not isinstance(node.target, REFERENCE_NODES):
            raise SyntaxError(f"invalid assignment target: {type(node.target).__name__}")
        ref = self.eval_reference(node.target, env)
        value = self.eval(node.value, env)
        self.current_node = node
        self.engine.write(ref, value)
        return value

    def _eval_delete(self, node: Delete, env: Environment) -> bool:
        target = node.target
        if isinstance(target, SuperMember):
            raise InvalidReferenceTarget("cannot delete a super reference", obj=target)
        if not isinstance(target, REFERENCE_NODES):
            # `delete <expression>` evaluates the operand and reports success.
            self.eval(target, env)
            return True
        ref = self.eval_reference(target, env)
        self.current_node = node
        return self.engine.delete(ref)

    def _eval_call(self, node: Call, env: Environment) -> Any:
        func = self.eval(node.callee, env)
        args: List[Any] = [self.eval(a, env) for a in node.args]
        if not callable(func):
            raise TypeError(f"{type(func).__name__} object is not callable")
        self._dbg("call", getattr(func, "__name__", type(func).__name__), len(args))
        return func(*args)
