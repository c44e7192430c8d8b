"""
Transforms raw parse trees into vprop AST nodes.

The input is the tagged-dict shape produced by the grammar front-end:
every node is a dict with a 'tag', and either 'children' (a list, or a
dict of named children), a typed 'value', or a 'text' payload. Location
keys ('line', 'col') are carried onto the resulting node as `loc`.
"""

from vprop.vprop_datatypes import (
    Literal, Identifier, Member, Index, Chain, SuperMember,
    Assign, Delete, Call, ObjectLiteral, Program, undefined,
)


class VPropTransformer:
    def _attach_loc(self, obj, node):
        line = node.get('line'); col = node.get('col')
        if line is not None and col is not None:
            obj.loc = {'line': line, 'col': col, 'tag': node.get('tag'), 'text': node.get('text')}
        return obj

    def transform(self, node: object) -> object:
        if isinstance(node, list):
            return [self.transform(n) for n in node]
        if not isinstance(node, dict):
            return Literal(node)

        tag = node.get('tag')
        children = node.get('children', [])

        match tag:
            # Structural containers
            case 'program':
                strict = False
                body = []
                for ch in children:
                    if isinstance(ch, dict) and ch.get('tag') == 'directive':
                        # Directives only count before the first statement.
                        if not body and ch.get('text') in ('use strict', 'use-strict'):
                            strict = True
                        continue
                    if isinstance(ch, dict) and ch.get('tag') in ('comment', 'line-comment', 'block-comment'):
                        continue
                    body.append(self.transform(ch))
                return self._attach_loc(Program(body, strict), node)
            case 'expr' | 'group':
                items = self._list(children)
                if len(items) != 1:
                    raise SyntaxError(f"'{tag}' expects exactly one child, got {len(items)}")
                return self.transform(items[0])

            # Atomics
            case 'number':
                txt = node.get('text')
                if 'value' in node:
                    return self._attach_loc(Literal(node['value']), node)
                if not isinstance(txt, str):
                    raise SyntaxError(f"number node has no text: {node!r}")
                try:
                    return self._attach_loc(Literal(int(txt)), node)
                except ValueError:
                    pass
                try:
                    return self._attach_loc(Literal(float(txt)), node)
                except ValueError:
                    raise SyntaxError(f"invalid number literal: {txt!r}") from None
            case 'string':
                return self._attach_loc(Literal(node['text']), node)
            case 'boolean' | 'null':
                return self._attach_loc(Literal(node.get('value')), node)
            case 'undefined':
                return self._attach_loc(Literal(undefined), node)
            case 'identifier' | 'name':
                return self._attach_loc(Identifier(node['text']), node)

            # Member expressions
            case 'member':
                obj, name = self._pair(children, tag)
                return self._attach_loc(Member(self.transform(obj), self._name_text(name)), node)
            case 'index':
                obj, key = self._pair(children, tag)
                return self._attach_loc(Index(self.transform(obj), self.transform(key)), node)
            case 'chain':
                obj, resolver = self._pair(children, tag)
                return self._attach_loc(Chain(self.transform(obj), self.transform(resolver)), node)
            case 'super-member':
                items = self._list(children)
                name = items[0] if items else node
                return self._attach_loc(SuperMember(self._name_text(name)), node)

            # Operators
            case 'assign':
                target, value = self._pair(children, tag)
                return self._attach_loc(Assign(self.transform(target), self.transform(value)), node)
            case 'delete':
                items = self._list(children)
                if len(items) != 1:
                    raise SyntaxError("'delete' expects exactly one operand")
                return self._attach_loc(Delete(self.transform(items[0])), node)
            case 'call':
                items = self._list(children)
                if not items:
                    raise SyntaxError("'call' requires a callee")
                args = []
                for ch in items[1:]:
                    if isinstance(ch, dict) and ch.get('tag') == 'args':
                        args.extend(self._list(ch.get('children', [])))
                    else:
                        args.append(ch)
                return self._attach_loc(Call(self.transform(items[0]), self.transform(args)), node)

            # Literals
            case 'object':
                entries = []
                for prop in self._list(children):
                    if not isinstance(prop, dict) or prop.get('tag') != 'property':
                        raise SyntaxError(f"object literal expects 'property' entries, got {prop!r}")
                    key_node, value_node = self._pair(prop.get('children', []), 'property')
                    entries.append((self._name_text(key_node), self.transform(value_node)))
                return self._attach_loc(ObjectLiteral(entries), node)

            case _:
                raise NotImplementedError(f"No transformer for tag '{tag}'")

    # --- Helpers ---

    def _list(self, children):
        if isinstance(children, dict):
            return list(children.values())
        return list(children or [])

    def _pair(self, children, tag):
        # Named children dicts keep grammar order; plain lists are positional.
        items = self._list(children)
        if len(items) != 2:
            raise SyntaxError(f"'{tag}' expects two operands, got {len(items)}")
        return items[0], items[1]

    def _name_text(self, node):
        if isinstance(node, str):
            return node
        if isinstance(node, dict):
            if node.get('tag') == 'number' and 'value' in node:
                return node['value']
            if node.get('text') is not None:
                return node['text']
        raise SyntaxError(f"expected a name, got {node!r}")
