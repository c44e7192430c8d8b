import pytest

from vprop.vprop_interpreter import Evaluator
from vprop.vprop_engine import ResolutionEngine
from vprop.vprop_builtins import Store, BoundFunction
from vprop.vprop_datatypes import (
    Literal, Identifier, Member, Index, Chain, SuperMember,
    Assign, Delete, Call, ObjectLiteral, Program,
    Record, Accessor, Environment, Reference, Symbol, undefined,
    UnresolvableReference, InvalidReferenceTarget, NotInvocable, StrictWriteFailure,
)


@pytest.fixture
def ev():
    evaluator = Evaluator()
    evaluator.global_env.assign("Store", Store)
    return evaluator


def run(ev, *stmts, strict=False):
    return ev.run(Program(list(stmts), strict=strict))


def test_points_scenario(ev):
    result = run(
        ev,
        Assign(Identifier("points"), Call(Identifier("Store"), [])),
        Assign(Identifier("obj"), ObjectLiteral([])),
        Assign(Chain(Identifier("obj"), Identifier("points")),
               ObjectLiteral([("x", Literal(1)), ("y", Literal(2))])),
        Member(Chain(Identifier("obj"), Identifier("points")), "x"),
    )
    assert result == 1

    gone = run(
        ev,
        Delete(Chain(Identifier("obj"), Identifier("points"))),
        Chain(Identifier("obj"), Identifier("points")),
    )
    assert gone is undefined


def test_eval_reference_does_not_dispatch(ev):
    calls = []

    class Tracking:
        def __vget__(self, base):
            calls.append(base)

    ev.global_env.assign("t", Tracking())
    ev.global_env.assign("o", Record())
    ref = ev.eval_reference(Chain(Identifier("o"), Identifier("t")), ev.global_env)
    assert isinstance(ref, Reference)
    assert ref.is_virtual()
    assert calls == []


def test_chain_copies_ambient_strictness(ev):
    ev.global_env.assign("o", Record())
    ev.global_env.assign("m", Store())
    ev.strict = True
    ref = ev.eval_reference(Chain(Identifier("o"), Identifier("m")), ev.global_env)
    assert ref.is_strict()


@pytest.mark.parametrize("base", [Literal(None), Literal(undefined)])
def test_chain_on_null_faults(ev, base):
    ev.global_env.assign("m", Store())
    with pytest.raises(InvalidReferenceTarget):
        run(ev, Chain(base, Identifier("m")))


def test_member_on_null_faults(ev):
    with pytest.raises(InvalidReferenceTarget):
        run(ev, Member(Literal(None), "x"))


def test_bound_callable_through_chain(ev):
    def greet(this, punctuation):
        return this["name"] + punctuation

    ev.global_env.assign("greet", greet)
    ev.global_env.assign("v", Record({"name": "v"}))
    value = run(ev, Call(Chain(Identifier("v"), Identifier("greet")), [Literal("!")]))
    assert value == "v!"
    bound = run(ev, Chain(Identifier("v"), Identifier("greet")))
    assert isinstance(bound, BoundFunction)


def test_method_calls_through_ordinary_members(ev):
    ev.global_env.assign("m", Store())
    ev.global_env.assign("k", Record())
    run(ev, Call(Member(Identifier("m"), "set"), [Identifier("k"), Literal(3)]))
    assert run(ev, Chain(Identifier("k"), Identifier("m"))) == 3
    assert run(ev, Member(Identifier("m"), "size")) == 1


def test_calling_a_non_callable_faults(ev):
    with pytest.raises(TypeError, match="not callable"):
        run(ev, Call(Literal(3), []))


def test_index_with_primitive_and_object_keys(ev):
    s = Symbol("s")
    ev.global_env.assign("s", s)
    ev.global_env.assign("o", Record())
    run(ev, Assign(Index(Identifier("o"), Identifier("s")), Literal("sym")))
    assert ev.global_env.bindings["o"].data[s] == "sym"
    with pytest.raises(TypeError, match="computed key"):
        run(ev, Index(Identifier("o"), ObjectLiteral([])))


def test_unresolvable_identifier(ev):
    with pytest.raises(UnresolvableReference):
        run(ev, Identifier("nothing"))
    run(ev, Assign(Identifier("created"), Literal(1)))
    assert ev.global_env.bindings["created"] == 1
    with pytest.raises(UnresolvableReference):
        run(ev, Assign(Identifier("other"), Literal(1)), strict=True)


def test_strict_program_faults_on_frozen_write(ev):
    ev.global_env.assign("o", Record({"x": 1}).freeze())
    run(ev, Assign(Member(Identifier("o"), "x"), Literal(2)))
    with pytest.raises(StrictWriteFailure):
        run(ev, Assign(Member(Identifier("o"), "x"), Literal(2)), strict=True)
    # Strictness is scoped to the program that declared it.
    assert ev.strict is False


def test_delete_results(ev):
    ev.global_env.assign("o", Record({"x": 1}))
    assert run(ev, Delete(Member(Identifier("o"), "x"))) is True
    assert run(ev, Delete(Identifier("never_bound"))) is True
    assert run(ev, Delete(Literal(5))) is True


def test_read_only_resolver_write_and_delete_fault(ev):
    class ReadOnly:
        def __vget__(self, base):
            return "ro"

    ev.global_env.assign("r", ReadOnly())
    ev.global_env.assign("o", Record())
    assert run(ev, Chain(Identifier("o"), Identifier("r"))) == "ro"
    with pytest.raises(NotInvocable):
        run(ev, Assign(Chain(Identifier("o"), Identifier("r")), Literal(1)))
    with pytest.raises(NotInvocable):
        run(ev, Delete(Chain(Identifier("o"), Identifier("r"))))


def test_assignment_returns_value_and_rejects_bad_targets(ev):
    assert run(ev, Assign(Identifier("a"), Literal(4))) == 4
    with pytest.raises(SyntaxError):
        run(ev, Assign(Literal(1), Literal(2)))


def test_super_member_reads_from_parent_with_this_receiver(ev):
    parent = Record({"who": Accessor(get=lambda this: this.data["name"]), "tag": "p"})
    this = Record({"name": "child", "tag": "c"}, parent=parent)
    env = Environment(parent=ev.global_env)
    env.assign("this", this)
    assert ev.eval(SuperMember("tag"), env) == "p"
    assert ev.eval(SuperMember("who"), env) == "child"


def test_super_member_cannot_be_deleted(ev):
    env = Environment(parent=ev.global_env)
    env.assign("this", Record(parent=Record({"x": 1})))
    with pytest.raises(InvalidReferenceTarget):
        ev.eval(Delete(SuperMember("x")), env)


def test_super_member_without_parent_faults(ev):
    env = Environment(parent=ev.global_env)
    env.assign("this", Record())
    with pytest.raises(InvalidReferenceTarget):
        ev.eval(SuperMember("x"), env)


def test_current_node_tracks_failing_expression(ev):
    ev.global_env.assign("o", Record())
    failing = Chain(Identifier("o"), Literal(3.5))
    assert run(ev, failing) is undefined
    bad = Chain(Identifier("o"), ObjectLiteral([]))
    with pytest.raises(NotInvocable):
        run(ev, bad)
    assert ev.current_node is bad


def test_custom_engine_is_used():
    engine = ResolutionEngine()
    evaluator = Evaluator(engine)
    assert evaluator.engine is engine
    assert evaluator.global_env is engine.global_env
