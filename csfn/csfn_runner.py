"""
A reference host loop for invocation programs.

A program is a list of statements. Each statement is an invocation plus an
optional body; the body runs only when the invocation answers STEP_INTO.
"""
from __future__ import annotations

import collections.abc
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from csfn.csfn_config import _dbg, max_steps as default_max_steps
from csfn.csfn_datatypes import Scope
from csfn.csfn_function import ControlFlow, Invocation
from csfn.csfn_registry import FunctionRegistry


class StepLimitExceeded(Exception):
    def __init__(self, limit: int):
        super().__init__(f"step limit of {limit} exceeded")
        self.limit = limit


@dataclass
class Statement:
    invocation: Invocation
    body: List['Statement'] = field(default_factory=list)

    def to_data(self) -> Dict[str, Any]:
        data = self.invocation.to_data()
        if self.body:
            data["body"] = [s.to_data() for s in self.body]
        return data

    @classmethod
    def from_data(cls, data: Any) -> 'Statement':
        body = data.get("body") if isinstance(data, collections.abc.Mapping) else None
        if not isinstance(body, list):
            body = []
        return cls(
            invocation=Invocation.from_data(data),
            body=[cls.from_data(s) for s in body],
        )


def load_program(data: Any) -> Tuple[List[Statement], Scope]:
    """Accepts a list of statements, or {program: [...], scope: {name: Value data}}."""
    if isinstance(data, collections.abc.Mapping):
        statements = data.get("program")
        if not isinstance(statements, list):
            statements = []
        scope = Scope.from_data(data.get("scope") or {})
    else:
        statements = data if isinstance(data, list) else []
        scope = Scope()
    return [Statement.from_data(s) for s in statements], scope


@dataclass
class ExecutionResult:
    """The structured result of running a program."""
    status: Literal['success', 'error']
    scope: Optional[Scope] = None
    steps: int = 0
    error_message: Optional[str] = None
    side_effects: List[Dict] = field(default_factory=list)

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        return f"Error after {self.steps} steps: {msg}"


class Runner:
    """Executes statements against a scope, honoring each invocation's control-flow answer."""

    def __init__(self, registry: Optional[FunctionRegistry] = None, max_steps: Optional[int] = None):
        # None means the process-wide registry, looked up on every step
        self.registry = registry
        self.max_steps = max_steps if max_steps is not None else default_max_steps()
        self.side_effects: List[Dict] = []
        self.steps = 0
        self._printer = None

    def _describe(self, invocation: Invocation) -> str:
        if self._printer is None:
            from csfn.csfn_printer import Printer
            self._printer = Printer(registry=self.registry)
        return self._printer.pformat(invocation)

    def _emit(self, topic: str, message: str, **extra):
        event = {"topics": [topic], "message": message}
        event.update(extra)
        self.side_effects.append(event)

    def _run_block(self, statements: List[Statement], scope: Scope, depth: int):
        for stmt in statements:
            inv = stmt.invocation
            if not inv.can_be_invoked_in(self.registry):
                _dbg("runner", "skip incomplete", inv.name)
                self._emit("skipped", self._describe(inv), depth=depth)
                continue
            if self.steps >= self.max_steps:
                raise StepLimitExceeded(self.max_steps)
            self.steps += 1
            ret = inv.run(scope, self.registry)
            scope = ret.scope
            _dbg("runner", "step", self.steps, inv.name, ret.control_flow.value)
            self._emit("trace", self._describe(inv), control_flow=ret.control_flow.value, depth=depth)
            if ret.control_flow is ControlFlow.STEP_INTO:
                scope = self._run_block(stmt.body, scope, depth + 1)
        return scope

    def run(self, program: List[Statement], scope: Optional[Scope] = None) -> ExecutionResult:
        scope = scope if scope is not None else Scope()
        self.side_effects = []
        self.steps = 0
        try:
            scope = self._run_block(program, scope, 0)
        except StepLimitExceeded as e:
            return ExecutionResult(
                status='error', scope=scope, steps=self.steps,
                error_message=f"StepLimitExceeded: {e}",
                side_effects=self.side_effects,
            )
        except Exception as e:
            # Host-registered functions may raise; the built-ins never do
            return ExecutionResult(
                status='error', scope=scope, steps=self.steps,
                error_message=f"InternalError: {e}",
                side_effects=self.side_effects,
            )
        return ExecutionResult(status='success', scope=scope, steps=self.steps, side_effects=self.side_effects)


def run_program(data: Any, *, registry: Optional[FunctionRegistry] = None,
                max_steps: Optional[int] = None) -> ExecutionResult:
    """Load a program document and run it in its own scope."""
    statements, scope = load_program(data)
    return Runner(registry=registry, max_steps=max_steps).run(statements, scope)


__all__ = [
    "ExecutionResult",
    "Runner",
    "Statement",
    "StepLimitExceeded",
    "load_program",
    "run_program",
]
