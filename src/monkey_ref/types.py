from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard

from .tree import BlockStatement, Identifier

# ---------- Value Model ----------
# Values are immutable once built; operators always construct new ones.

class ObjectType(str, Enum):
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    NULL = "NULL"
    RETURN_VALUE = "RETURN_VALUE"
    ERROR = "ERROR"
    FUNCTION = "FUNCTION"

    def __str__(self) -> str:
        return self.value


class ErrorKind(Enum):
    UNBOUND_IDENTIFIER = "UnboundIdentifier"
    UNKNOWN_OPERATOR = "UnknownOperator"
    TYPE_MISMATCH = "TypeMismatch"
    DIVISION_BY_ZERO = "DivisionByZero"
    NOT_A_FUNCTION = "NotAFunction"
    ARITY_MISMATCH = "ArityMismatch"
    STACK_OVERFLOW = "StackOverflow"


@dataclass(frozen=True)
class MkInteger:
    value: int
    type_name = ObjectType.INTEGER

    def inspect(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return self.inspect()


@dataclass(frozen=True, eq=False)
class MkBool:
    """Only the two canonical instances TRUE and FALSE should exist."""
    value: bool
    type_name = ObjectType.BOOLEAN

    def inspect(self) -> str:
        return "true" if self.value else "false"

    def __repr__(self) -> str:
        return self.inspect()


@dataclass(frozen=True, eq=False)
class MkNull:
    type_name = ObjectType.NULL

    def inspect(self) -> str:
        return "null"

    def __repr__(self) -> str:
        return self.inspect()


@dataclass(frozen=True)
class MkReturn:
    """Carries a `return` value up to the nearest call boundary."""
    value: 'MkValue'
    type_name = ObjectType.RETURN_VALUE

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(frozen=True)
class MkError:
    """Evaluation failure. Propagates unchanged to the top-level caller."""
    kind: ErrorKind
    message: str
    type_name = ObjectType.ERROR

    def inspect(self) -> str:
        return f"ERROR: {self.message}"

    def __repr__(self) -> str:
        return f"MkError({self.kind.value}, {self.message!r})"


@dataclass(frozen=True, eq=False)
class MkFn:
    parameters: Tuple[Identifier, ...]
    body: BlockStatement
    env: 'Environment'  # defining scope, kept alive by the closure
    type_name = ObjectType.FUNCTION

    def inspect(self) -> str:
        params = ", ".join(p.value for p in self.parameters)
        return f"fn({params}) {self.body.string()}"

    def __repr__(self) -> str:
        names = ", ".join(p.value for p in self.parameters) or "nullary"
        return f"<fn params={names}>"


TRUE = MkBool(True)
FALSE = MkBool(False)
NULL = MkNull()

MkValue: TypeAlias = MkInteger | MkBool | MkNull | MkReturn | MkError | MkFn


def native_bool(value: bool) -> MkBool:
    return TRUE if value else FALSE


def new_error(kind: ErrorKind, message: str) -> MkError:
    return MkError(kind, message)


def is_error(value: Optional[MkValue]) -> TypeGuard[MkError]:
    return isinstance(value, MkError)


def is_abrupt(value: Optional[MkValue]) -> TypeGuard[MkReturn | MkError]:
    """A pending `return` or an error: either one must stop the enclosing evaluation."""
    return isinstance(value, (MkReturn, MkError))


# ---------- Environment ----------

class Environment:
    """Name -> value scope, optionally enclosed by an outer scope."""

    def __init__(self, outer: Optional['Environment'] = None):
        self.store: Dict[str, MkValue] = {}
        self.outer = outer

    def get(self, name: str) -> Optional[MkValue]:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        return None

    def define(self, name: str, val: MkValue) -> MkValue:
        self.store[name] = val
        return val

    def enclosed(self) -> 'Environment':
        return Environment(outer=self)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def names(self) -> Iterator[str]:
        """Names visible from this scope, innermost binding first."""
        seen = set()
        env: Optional[Environment] = self
        while env is not None:
            for name in env.store:
                if name not in seen:
                    seen.add(name)
                    yield name
            env = env.outer


# ---------- Exceptions ----------

class MonkeyRuntimeError(Exception):
    """Raised by the runner when evaluation ends in an error value."""

    def __init__(self, error: MkError):
        super().__init__(error.message)
        self.error = error
        self.kind = error.kind
