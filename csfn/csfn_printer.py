"""
A pretty-printer for csfn values, arguments and invocations.
"""
import collections.abc
import json

import pystache

from csfn.csfn_datatypes import Scope, Type, Value, COMPARATOR, STRING, UNDEFINED, URL
from csfn.csfn_function import Function, Invocation, Literal, Reference

MISSING_ARGUMENT = "___"


class Printer:
    """Formats csfn objects into short, readable text for editors and the CLI."""

    def __init__(self, registry=None):
        # Invocations are described with functions from this registry, or the global one
        self.registry = registry
        # Output is plain text, so nothing is HTML-escaped
        self._renderer = pystache.Renderer(escape=lambda s: s)
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj)

    def _get_handler(self, obj):
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, collections.abc.Mapping): return self._pformat_dict
        return repr

    def _create_handlers(self):
        return {
            Value: self._pformat_value,
            Type: self._pformat_type,
            Literal: self._pformat_literal,
            Reference: self._pformat_reference,
            Scope: self._pformat_scope,
            Invocation: self._pformat_invocation,
            Function: self._pformat_function,
        }

    def _pformat_value(self, obj: Value):
        if obj.type == UNDEFINED:
            return "undefined"
        if obj.type in (STRING, COMPARATOR):
            return json.dumps(obj.string_value, ensure_ascii=False)
        if obj.type == URL:
            return f"<{obj.string_value}>"
        return obj.string_value

    def _pformat_type(self, obj: Type):
        if obj.is_generic:
            return f"<{obj.generic_id}>"
        return obj.name

    def _pformat_literal(self, obj: Literal):
        return self.pformat(obj.value)

    def _pformat_reference(self, obj: Reference):
        return ".".join(obj.key_path) if obj.key_path else "?"

    def _pformat_dict(self, obj):
        items = [f"{k}: {self.pformat(v)}" for k, v in obj.items()]
        return "{" + ", ".join(items) + "}"

    def _pformat_scope(self, obj: Scope):
        return self._pformat_dict(obj.to_dict())

    def _pformat_function(self, obj: Function):
        params = ", ".join(
            f"{p.name}: {self.pformat(p.variable_type)}" for p in obj.parameters
        )
        return f"{obj.name}({params})"

    def sentence_template(self, function: Function) -> str:
        """A Mustache template reading like the function's call in prose.

        Slots are keyed by position: p0, p1 for arguments and l0, l1 for labels.
        Names and labels themselves never appear in the template text.
        """
        parts = ["{{function}}"]
        for i, p in enumerate(function.parameters):
            if p.label:
                parts.append("{{l%d}}" % i)
            parts.append("{{p%d}}" % i)
        return " ".join(parts)

    def _pformat_invocation(self, obj: Invocation):
        function = obj.function_in(self.registry)
        context = {"function": function.name}
        for i, p in enumerate(function.parameters):
            if p.label:
                context["l%d" % i] = p.label
            arg = obj.arguments.get(p.name)
            context["p%d" % i] = self.pformat(arg) if arg is not None else MISSING_ARGUMENT
        return self._renderer.render(self.sentence_template(function), context)
