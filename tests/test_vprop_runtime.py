import pytest

from vprop import ScriptRunner, RunnerConfig, Store, undefined
from vprop.vprop_datatypes import Record, NotInvocable


def ident(name):
    return {'tag': 'identifier', 'text': name}


def chain(left, right):
    return {'tag': 'chain', 'children': [ident(left), ident(right)]}


def assign(target, value, **loc):
    return {'tag': 'assign', 'children': [target, value], **loc}


def obj(**props):
    return {'tag': 'object', 'children': [
        {'tag': 'property', 'children': [{'tag': 'name', 'text': k}, {'tag': 'number', 'value': v}]}
        for k, v in props.items()
    ]}


def program(*stmts):
    return {'tag': 'program', 'children': list(stmts)}


@pytest.fixture
def runner():
    return ScriptRunner(RunnerConfig())


@pytest.mark.asyncio
async def test_points_scenario(runner):
    res = await runner.handle_ast(program(
        assign(ident('points'), {'tag': 'call', 'children': [ident('Store')]}),
        assign(ident('obj'), obj()),
        assign(chain('obj', 'points'), obj(x=1, y=2)),
        {'tag': 'member', 'children': [chain('obj', 'points'), {'tag': 'name', 'text': 'x'}]},
    ))
    assert res.status == 'success', res.error_message
    assert res.value == 1

    res = await runner.handle_ast(program(
        {'tag': 'delete', 'children': [chain('obj', 'points')]},
        chain('obj', 'points'),
    ))
    assert res.status == 'success', res.error_message
    assert res.value is undefined


@pytest.mark.asyncio
async def test_not_invocable_error_result(runner):
    class ReadOnly:
        def __vget__(self, base):
            return 1

    runner.bind('ro', ReadOnly())
    runner.bind('o', Record())
    res = await runner.handle_ast(program(
        assign(chain('o', 'ro'), {'tag': 'number', 'value': 1}, line=2, col=1),
    ))
    assert res.status == 'error'
    assert res.error_type == 'NotInvocable'
    assert isinstance(res.exception, NotInvocable)
    assert res.error_message.startswith("NotInvocable: ReadOnly object is not invocable for set")
    assert "At: o :: ro = 1" in res.error_message
    assert res.format_error().startswith("Error on line 2, col 1: NotInvocable")


@pytest.mark.asyncio
async def test_null_chain_is_invalid_target(runner):
    res = await runner.handle_ast(program(
        {'tag': 'chain', 'children': [{'tag': 'null', 'value': None}, ident('Store')]},
    ))
    assert res.status == 'error'
    assert res.error_type == 'InvalidReferenceTarget'
    assert res.format_error().startswith("InvalidReferenceTarget:")


@pytest.mark.asyncio
async def test_unresolvable_identifier_error(runner):
    res = await runner.handle_ast(program(ident('missing')))
    assert res.status == 'error'
    assert res.error_message.startswith("ReferenceError: missing is not defined")


@pytest.mark.asyncio
async def test_handler_faults_surface_unchanged(runner):
    err = KeyError("inner")

    class Failing:
        def __vget__(self, base):
            raise err

    runner.bind('f', Failing())
    runner.bind('o', Record())
    res = await runner.handle_ast(program(chain('o', 'f')))
    assert res.status == 'error'
    assert res.exception is err
    assert res.error_type == 'KeyError'


@pytest.mark.asyncio
async def test_awaitable_final_value_is_awaited(runner):
    class AsyncResolver:
        async def __vget__(self, base):
            return 42

    runner.bind('a', AsyncResolver())
    runner.bind('o', Record())
    res = await runner.handle_ast(program(chain('o', 'a')))
    assert res.status == 'success', res.error_message
    assert res.value == 42


@pytest.mark.asyncio
async def test_strict_config_and_directive():
    strict_runner = ScriptRunner(RunnerConfig(strict=True))
    res = await strict_runner.handle_ast(program(assign(ident('fresh'), {'tag': 'number', 'value': 1})))
    assert res.status == 'error'
    assert res.error_type == 'UnresolvableReference'

    sloppy = ScriptRunner(RunnerConfig())
    res = await sloppy.handle_ast({'tag': 'program', 'children': [
        {'tag': 'directive', 'text': 'use strict'},
        assign({'tag': 'member', 'children': [
            {'tag': 'call', 'children': [ident('freeze'), obj(x=1)]},
            {'tag': 'name', 'text': 'x'}]}, {'tag': 'number', 'value': 2}),
    ]})
    assert res.status == 'error'
    assert res.error_type == 'StrictWriteFailure'
    assert res.error_message.startswith("TypeError: cannot assign to 'x'")


def test_run_is_synchronous_and_raises(runner):
    runner.bind('o', Record())
    runner.bind('n', 5)
    assert runner.run(program(ident('n'))) == 5
    with pytest.raises(NotInvocable):
        runner.run(program({'tag': 'chain', 'children': [ident('o'), obj()]}))


def test_stdlib_bindings(runner):
    env = runner.root_env.bindings
    for name in ("Store", "WeakStore", "Symbol", "undefined", "freeze", "is_frozen",
                 "create", "accessor", "keys", "has_own", "VGET", "VSET", "VDELETE"):
        assert name in env
    proto = runner.run(program(obj(a=1)))
    child = env["create"](proto)
    assert child.parent is proto
    assert runner.engine.objects.get(child, "a") == 1
    assert env["keys"](proto) == ["a"]
    assert env["has_own"](child, "a") is False
    assert env["is_frozen"](env["freeze"](child)) is True
    with pytest.raises(TypeError):
        env["freeze"](3)
    with pytest.raises(TypeError):
        env["create"](3)


def test_builtin_subset_disables_callable_binding():
    runner = ScriptRunner(RunnerConfig(builtins=("store",)))
    runner.bind('o', Record())
    runner.bind('f', len)
    with pytest.raises(NotInvocable):
        runner.run(program(chain('o', 'f')))
    runner.bind('m', Store())
    assert runner.run(program(chain('o', 'm'))) is undefined


def test_host_registered_resolver_type(runner):
    class Counter:
        def __init__(self):
            self.hits = 0

    runner.attach_handlers(Counter, on_get=lambda counter, base: setattr(counter, "hits", counter.hits + 1) or counter.hits)
    c = Counter()
    runner.bind('c', c)
    runner.bind('o', Record())
    assert runner.run(program(chain('o', 'c'))) == 1
    assert runner.run(program(chain('o', 'c'))) == 2


def test_script_records_self_attach_through_reserved_symbols(runner):
    runner.bind('handler', lambda base: "from-record")
    runner.bind('o', Record())
    runner.bind('r', Record())
    value = runner.run(program(
        assign({'tag': 'index', 'children': [ident('r'), ident('VGET')]}, ident('handler')),
        assign({'tag': 'member', 'children': [ident('r'), {'tag': 'name', 'text': '__vget__'}]},
               {'tag': 'number', 'value': 1}),
        chain('o', 'r'),
    ))
    assert value == "from-record"
