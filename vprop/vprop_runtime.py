# vprop runtime: standard library bindings and the script runner.

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Optional

from vprop.vprop_datatypes import (
    Node, Record, Accessor, Symbol, Environment, Program, undefined,
    UnresolvableReference, InvalidReferenceTarget, NotInvocable,
    StrictWriteFailure, StrictDeleteFailure,
)
from vprop.vprop_registry import ResolverRegistry, HandlerSet, VGET, VSET, VDELETE
from vprop.vprop_builtins import Store, WeakStore, install_builtins
from vprop.vprop_engine import ResolutionEngine
from vprop.vprop_interpreter import Evaluator
from vprop.vprop_transformer import VPropTransformer
from vprop.vprop_printer import Printer
from vprop.vprop_config import RunnerConfig

# ===================================================================
# 1. The Standard Library
# ===================================================================

class StdLib:
    """Python implementations of the global functions every program sees."""

    # Bound under these names in addition to the `_name` methods below.
    VALUES: Dict[str, Any] = {
        "Store": Store,
        "WeakStore": WeakStore,
        "Symbol": Symbol,
        "undefined": undefined,
        "VGET": VGET,
        "VSET": VSET,
        "VDELETE": VDELETE,
    }

    def __init__(self, evaluator: Evaluator):
        self.evaluator = evaluator

    def install(self, env: Environment) -> None:
        for name, value in self.VALUES.items():
            env.assign(name, value)
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                env.assign(name[1:], member)

    def _freeze(self, obj):
        if not isinstance(obj, Record):
            raise TypeError(f"freeze expects an object, not {type(obj).__name__}")
        return obj.freeze()

    def _is_frozen(self, obj):
        return isinstance(obj, Record) and obj.frozen

    def _create(self, parent=None):
        """Object.create-style constructor: a fresh record whose prototype is parent."""
        if parent is not None and not isinstance(parent, Record):
            raise TypeError(f"prototype must be an object or null, not {type(parent).__name__}")
        return Record(parent=parent)

    def _accessor(self, get=None, set=None):
        return Accessor(get, set)

    def _keys(self, obj):
        if isinstance(obj, Record):
            return [k for k in obj.data if isinstance(k, str)]
        raise TypeError(f"keys expects an object, not {type(obj).__name__}")

    def _has_own(self, obj, key):
        return isinstance(obj, Record) and key in obj.data


# ===================================================================
# 2. Script Execution
# ===================================================================

@dataclass
class ExecutionResult:
    """The structured result of running a program."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    error_loc: Optional[Dict[str, Any]] = None
    exception: Optional[BaseException] = None

    def format_error(self) -> str:
        """Formats an error message with line and column if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if self.error_loc and self.error_loc.get('line') is not None:
            line = self.error_loc.get('line')
            col = self.error_loc.get('col')
            col_info = f", col {col}" if col is not None else ""
            return f"Error on line {line}{col_info}: {msg}"
        return msg


class ScriptRunner:
    """Transforms and executes vprop programs against one engine."""

    def __init__(self, config: Optional[RunnerConfig] = None, registry: Optional[ResolverRegistry] = None):
        self.config = config if config is not None else RunnerConfig.from_env()
        if registry is None:
            registry = install_builtins(ResolverRegistry(), self.config.builtins)
        self.registry = registry
        self.root_env = Environment()
        self.engine = ResolutionEngine(registry, global_env=self.root_env, debug=self.config.debug)
        self.evaluator = Evaluator(self.engine, strict=self.config.strict)
        self.transformer = VPropTransformer()
        StdLib(self.evaluator).install(self.root_env)

    # --- Host surface ---

    def bind(self, name: str, value: Any) -> None:
        """Exposes a host value to programs as a global binding."""
        self.root_env.assign(name, value)

    def attach_handlers(self, target_type: type, *, on_get: Optional[Callable] = None,
                        on_set: Optional[Callable] = None,
                        on_delete: Optional[Callable] = None) -> HandlerSet:
        return self.registry.attach_handlers(target_type, on_get=on_get, on_set=on_set, on_delete=on_delete)

    # --- Execution ---

    def transform(self, tree: Any) -> Program:
        node = tree if isinstance(tree, Node) else self.transformer.transform(tree)
        if isinstance(node, Program):
            return node
        return Program([node])

    def run(self, program: Any) -> Any:
        """Runs a program (or raw tree) synchronously; faults propagate to the caller."""
        if not isinstance(program, Program):
            program = self.transform(program)
        return self.evaluator.run(program, self.root_env)

    async def handle_ast(self, tree: Any) -> ExecutionResult:
        """Runs a raw tree and reports the outcome as an ExecutionResult.

        Evaluation is synchronous. A program whose final value is awaitable
        (e.g. a handler written as a coroutine) has that value awaited here.
        """
        self.evaluator.current_node = None
        try:
            program = self.transform(tree)
            value = self.evaluator.run(program, self.root_env)
            if inspect.isawaitable(value):
                value = await value
            return ExecutionResult(status='success', value=value)
        except Exception as e:
            msg, loc = self._format_runtime_error(e, self.evaluator.current_node)
            return ExecutionResult(status='error', error_message=msg, error_type=type(e).__name__,
                                   error_loc=loc, exception=e)

    def _format_runtime_error(self, e: Exception, node) -> tuple[str, Optional[dict]]:
        match e:
            case UnresolvableReference():
                msg = f"ReferenceError: {e}"
            case InvalidReferenceTarget():
                msg = f"InvalidReferenceTarget: {e}"
            case NotInvocable():
                msg = f"NotInvocable: {e}"
            case StrictWriteFailure() | StrictDeleteFailure():
                msg = f"TypeError: {e}"
            case SyntaxError():
                msg = f"SyntaxError: {e}"
            case _:
                msg = f"{type(e).__name__}: {e}"

        if node is not None:
            msg = f"{msg}\nAt: {Printer().pformat(node)}"
        loc = getattr(node, 'loc', None) if node is not None else None
        return msg, loc
