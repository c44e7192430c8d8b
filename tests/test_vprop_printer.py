from vprop.vprop_printer import Printer
from vprop.vprop_builtins import Store
from vprop.vprop_datatypes import (
    Literal, Identifier, Member, Index, Chain, SuperMember,
    Assign, Delete, Call, ObjectLiteral, Program,
    Reference, Record, Environment, Symbol, undefined,
)


def test_values():
    p = Printer()
    assert p.pformat(undefined) == "undefined"
    assert p.pformat(None) == "null"
    assert p.pformat(True) == "true"
    assert p.pformat("it's") == "'it\\'s'"
    assert p.pformat([1, "a"]) == "[1, 'a']"
    assert p.pformat(Record({"x": 1, "y": Record()})) == "{x: 1, y: {}}"
    assert p.pformat(Record({"a b": 1})) == "{['a b']: 1}"
    assert p.pformat(len) == "<fn len>"


def test_nodes_render_as_source():
    p = Printer()
    chain = Chain(Identifier("obj"), Identifier("points"))
    assert p.pformat(chain) == "obj :: points"
    assert p.pformat(Member(chain, "x")) == "obj :: points.x"
    assert p.pformat(Delete(chain)) == "delete obj :: points"
    assert p.pformat(Assign(chain, ObjectLiteral([("x", Literal(1))]))) == "obj :: points = {x: 1}"
    assert p.pformat(Call(Index(Identifier("a"), Literal("k")), [Literal(1), Literal(None)])) == "a['k'](1, null)"
    assert p.pformat(SuperMember("z")) == "super.z"
    assert p.pformat(Program([Identifier("a"), Identifier("b")], strict=True)) == "'use strict'\na\nb"


def test_references():
    p = Printer()
    assert p.pformat(Reference(Record(), "x")) == "{}.x"
    assert p.pformat(Reference(Record({"k": 1}), 0)) == "{...}[0]"
    assert p.pformat(Reference(Record(), Store())) == "{} :: <Store>"
    assert p.pformat(Reference(Record(), len)) == "{} :: len"
    assert p.pformat(Reference(Environment(), "a", binding=True)) == "a"
    assert p.pformat(Reference(None, "a", binding=True)) == "a (unresolvable)"
    assert p.pformat(Reference(Record(), "x", is_super=True)) == "super.x"
    assert repr(Reference(Record(), "x")) == "<Reference {}.x>"
    assert p.pformat(Reference(Record(), Symbol("s"))) == "{}[Symbol(s)]"


def test_self_referencing_host_mapping_is_truncated():
    p = Printer()
    loop = {}
    loop["self"] = loop
    assert p.pformat({}) == "#{}"
    assert p.pformat(loop) == "#{'self': #{'self': #{'self': #{...}}}}"
