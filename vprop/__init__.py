"""vprop: virtual property references and the `::` chaining operator."""

from vprop.vprop_datatypes import (
    Reference, Record, Accessor, Symbol, Environment, undefined,
    UnresolvableReference, InvalidReferenceTarget, NotInvocable,
    StrictWriteFailure, StrictDeleteFailure,
)
from vprop.vprop_registry import ResolverRegistry, HandlerSet, VGET, VSET, VDELETE
from vprop.vprop_builtins import Store, WeakStore, BoundFunction, install_builtins, default_registry
from vprop.vprop_engine import ResolutionEngine
from vprop.vprop_interpreter import Evaluator
from vprop.vprop_config import RunnerConfig
from vprop.vprop_runtime import ScriptRunner, ExecutionResult
