from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from lexer import (
    INT64_MAX,
    INT64_MIN,
    LBRACKET,
    NUMBER,
    OPERATOR,
    RBRACKET,
    CalcError,
    Token,
)


# Higher rank binds tighter. New operators only need an entry here and in
# OPERATOR_RULES plus a branch in Evaluator._apply.
PRECEDENCE: Dict[str, int] = {
    "+": 1,
    "x": 2,
    "/": 2,
}

OPERATOR_RULES: Dict[str, str] = {
    "+": "ADD",
    "x": "MUL",
    "/": "DIV",
}

# The lowest tier is never reduced during the scan; it waits for the drain,
# which resolves it most recent first.
LOWEST_RANK = min(PRECEDENCE.values())

DEFAULT_MAX_DEPTH = 64


class UnbalancedBrackets(CalcError):
    """Raised when a '[' has no matching ']'."""


class UnmatchedRightBracket(CalcError):
    """Raised when a ']' appears with no open '[' at its level."""


class MissingOperand(CalcError):
    """Raised when an operator is applied with fewer than two values."""


class DivisionByZero(CalcError):
    pass


class EmptyExpression(CalcError):
    """Raised when an expression or bracket group yields no value."""


class MalformedExpression(CalcError):
    """Raised when values are left over after every operator is applied."""


class IntegerOverflow(CalcError):
    """Raised when a result leaves the signed 64-bit range."""


class NestingTooDeep(CalcError):
    pass


@dataclass
class StepEntry:
    step_index: int
    state_id: str
    depth: int
    rule: str
    operands: Tuple[int, ...]
    result: Optional[int]
    position: Optional[int]

    def describe(self) -> str:
        text = f"{self.state_id} depth={self.depth} {self.rule}"
        if self.operands:
            text += " " + " ".join(str(v) for v in self.operands)
        if self.result is not None:
            text += f" -> {self.result}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_index": self.step_index,
            "state_id": self.state_id,
            "depth": self.depth,
            "rule": self.rule,
            "operands": list(self.operands),
            "result": self.result,
            "position": self.position,
        }


class StepLogger:
    def __init__(self) -> None:
        self.entries: List[StepEntry] = []
        self.next_state_index = 0

    def record(
        self,
        *,
        rule: str,
        depth: int,
        operands: Tuple[int, ...] = (),
        result: Optional[int] = None,
        position: Optional[int] = None,
    ) -> StepEntry:
        step_index = self.next_state_index
        entry = StepEntry(
            step_index=step_index,
            state_id=f"s_{step_index:06d}",
            depth=depth,
            rule=rule,
            operands=operands,
            result=result,
            position=position,
        )
        self.entries.append(entry)
        self.next_state_index += 1
        return entry

    def reset(self) -> None:
        self.entries.clear()
        self.next_state_index = 0

    def format_lines(self) -> List[str]:
        return [entry.describe() for entry in self.entries]


class Evaluator:
    """Reduces a token sequence to a signed 64-bit integer.

    Operators are resolved with an operator stack ranked by PRECEDENCE.
    A bracket group is located by depth counting over the flat token list,
    evaluated recursively with fresh stacks, and its value is pushed back
    as an ordinary number.
    """

    def __init__(
        self,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        logger: Optional[StepLogger] = None,
    ) -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_depth = max_depth
        self.logger = logger or StepLogger()

    def evaluate(self, tokens: Sequence[Token]) -> int:
        self.logger.reset()
        self.logger.record(rule="SEED", depth=0)
        try:
            return self._evaluate(list(tokens), 0, None)
        except CalcError as error:
            error.step_index = self.logger.entries[-1].step_index
            raise
        except Exception as exc:
            # Surface Python-level faults through the same error channel so
            # the CLI can report them like any other evaluation failure.
            wrapped = CalcError(f"Internal evaluator error: {exc}", rule="internal")
            wrapped.step_index = self.logger.entries[-1].step_index
            raise wrapped from exc

    def _evaluate(self, tokens: List[Token], depth: int, origin: Optional[int]) -> int:
        values: List[int] = []
        operators: List[Tuple[str, int]] = []

        i = 0
        n = len(tokens)
        while i < n:
            token = tokens[i]
            kind = token.kind
            if kind == NUMBER:
                values.append(int(token.value))
            elif kind == OPERATOR:
                symbol = str(token.value)
                rank = PRECEDENCE[symbol]
                while operators:
                    top_rank = PRECEDENCE[operators[-1][0]]
                    if top_rank < rank or top_rank == LOWEST_RANK:
                        break
                    pending, pending_position = operators.pop()
                    self._reduce(values, pending, pending_position, depth)
                operators.append((symbol, token.position))
            elif kind == LBRACKET:
                close = self._matching_bracket(tokens, i)
                if depth + 1 > self.max_depth:
                    raise NestingTooDeep(
                        f"Brackets nested deeper than {self.max_depth} levels",
                        position=token.position,
                        rule="BRACKET",
                    )
                result = self._evaluate(tokens[i + 1:close], depth + 1, token.position)
                self.logger.record(rule="BRACKET", depth=depth + 1, result=result, position=token.position)
                values.append(result)
                i = close
            elif kind == RBRACKET:
                raise UnmatchedRightBracket(
                    "Unmatched right bracket ']'",
                    position=token.position,
                    rule="BRACKET",
                )
            else:
                raise CalcError(f"Unknown token kind {kind!r}", position=token.position, rule="internal")
            i += 1

        while operators:
            pending, pending_position = operators.pop()
            self._reduce(values, pending, pending_position, depth)

        if not values:
            raise EmptyExpression("Empty expression", position=origin, rule="DRAIN")
        if len(values) > 1:
            raise MalformedExpression(
                f"Malformed expression: {len(values)} values left without an operator between them",
                position=origin,
                rule="DRAIN",
            )
        return values[0]

    def _matching_bracket(self, tokens: List[Token], start: int) -> int:
        level = 0
        for j in range(start, len(tokens)):
            kind = tokens[j].kind
            if kind == LBRACKET:
                level += 1
            elif kind == RBRACKET:
                level -= 1
                if level == 0:
                    return j
        raise UnbalancedBrackets(
            "Unbalanced brackets: '[' is never closed",
            position=tokens[start].position,
            rule="BRACKET",
        )

    def _reduce(self, values: List[int], symbol: str, position: int, depth: int) -> None:
        rule = OPERATOR_RULES[symbol]
        if not values:
            raise MissingOperand(f"Missing right operand for '{symbol}'", position=position, rule=rule)
        right = values.pop()
        if not values:
            raise MissingOperand(f"Missing left operand for '{symbol}'", position=position, rule=rule)
        left = values.pop()
        result = self._apply(symbol, left, right, position)
        self.logger.record(rule=rule, depth=depth, operands=(left, right), result=result, position=position)
        values.append(result)

    def _apply(self, symbol: str, left: int, right: int, position: int) -> int:
        rule = OPERATOR_RULES[symbol]
        if symbol == "+":
            result = left + right
        elif symbol == "x":
            result = left * right
        elif symbol == "/":
            if right == 0:
                raise DivisionByZero("Division by zero", position=position, rule=rule)
            # Truncate toward zero; floor division alone rounds down.
            result = abs(left) // abs(right)
            if (left < 0) != (right < 0):
                result = -result
        else:
            raise CalcError(f"Unsupported operator '{symbol}'", position=position, rule="internal")
        if result < INT64_MIN or result > INT64_MAX:
            raise IntegerOverflow(
                f"Integer overflow: {left} {symbol} {right} does not fit in 64 bits",
                position=position,
                rule=rule,
            )
        return result


def evaluate(tokens: Sequence[Token], *, max_depth: int = DEFAULT_MAX_DEPTH) -> int:
    return Evaluator(max_depth=max_depth).evaluate(tokens)


class ErrorFormatter:
    def __init__(self, evaluator: Optional[Evaluator] = None) -> None:
        self.evaluator = evaluator

    def _entries(self) -> List[StepEntry]:
        if self.evaluator is None:
            return []
        return self.evaluator.logger.entries

    def format_text(self, error: CalcError, verbose: bool = False) -> str:
        lines: List[str] = []
        if verbose and self._entries():
            lines.append("Reduction trace (most recent step last):")
            for entry in self._entries():
                lines.append(f"  {entry.describe()}")
        message = f"Error: {error.message}"
        if error.position is not None:
            message += f" (at token {error.position})"
        lines.append(message)
        return "\n".join(lines)

    def to_json(self, error: CalcError) -> str:
        data = {
            "error": {
                "type": error.__class__.__name__,
                "message": error.message,
                "position": error.position,
                "rule": error.rule or "evaluation",
                "failing_step_index": error.step_index,
            },
            "trace": [entry.to_dict() for entry in self._entries()],
        }
        return json.dumps(data, indent=2)
