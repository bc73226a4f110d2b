# lpmodel : a python library for building and solving linear programs

# Copyright (c) 2024 Ke Shi

# Licensed under GNU LGPL.3

"""
Data model of a linear (or mixed-integer) program.

A Model owns its variables, an objective and a list of constraints:

    max/min c*x + d
    s.t.    a_i*x  (<=, =, >=)  b_i
            lb <= x <= ub,  x_j integer for j in I

Solving is delegated to a SolverAdapter (see pulp_based_impl,
optlang_based_implementations and pyomo_based_impl).
"""

import abc
import enum
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .exceptions import (
    DuplicateNameError,
    InvalidBoundsError,
    SolutionUnavailableError,
    UnknownVariableError,
)

logger = logging.getLogger(__name__)


class Domain(enum.Enum):
    CONTINUOUS = "continuous"
    INTEGER = "integer"


class Sense(enum.Enum):
    MINIMIZE = "min"
    MAXIMIZE = "max"

    @classmethod
    def parse(cls, sense):
        if isinstance(sense, cls):
            return sense
        key = str(sense).strip().lower()
        if key in ("min", "minimize"):
            return cls.MINIMIZE
        if key in ("max", "maximize"):
            return cls.MAXIMIZE
        raise ValueError(f"Unknown objective sense: {sense!r}")


class Operator(enum.Enum):
    LE = "<="
    EQ = "="
    GE = ">="

    @classmethod
    def parse(cls, operator):
        if isinstance(operator, cls):
            return operator
        key = str(operator).strip()
        if key == "==":
            return cls.EQ
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown constraint operator: {operator!r}")


class Status(enum.Enum):
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    ERROR = "error"


def _format_number(value):
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _to_bound(value, default):
    if value is None:
        return default
    return float(value)


@dataclass(frozen=True, eq=False)
class Variable:
    """A decision variable. Variables compare and hash by identity."""

    name: str
    lb: float = -math.inf
    ub: float = math.inf
    domain: Domain = Domain.CONTINUOUS

    @property
    def is_integer(self):
        return self.domain is Domain.INTEGER

    def __add__(self, other):
        return LinearExpression.build(self) + other

    def __radd__(self, other):
        return LinearExpression.build(self) + other

    def __sub__(self, other):
        return LinearExpression.build(self) - other

    def __rsub__(self, other):
        return other - LinearExpression.build(self)

    def __mul__(self, factor):
        return LinearExpression.build(self) * factor

    def __rmul__(self, factor):
        return LinearExpression.build(self) * factor

    def __truediv__(self, divisor):
        return LinearExpression.build(self) / divisor

    def __neg__(self):
        return LinearExpression.build(self) * -1

    def __repr__(self):
        return (
            f"Variable({self.name!r}, lb={self.lb}, ub={self.ub}, "
            f"domain={self.domain.value})"
        )


class LinearExpression:
    """Sum of coefficient * variable terms plus a constant.

    Coefficients of a variable that is added more than once are summed, so a
    variable appears at most once in `terms`.
    """

    __slots__ = ("terms", "constant")

    def __init__(self, terms=None, constant=0.0):
        self.terms: Dict[Variable, float] = {}
        self.constant = float(constant)
        if terms:
            items = terms.items() if isinstance(terms, Mapping) else terms
            for variable, coefficient in items:
                self.add_term(variable, coefficient)

    def add_term(self, variable, coefficient):
        if not isinstance(variable, Variable):
            raise TypeError(f"Expected a Variable, got {type(variable).__name__}")
        self.terms[variable] = self.terms.get(variable, 0.0) + float(coefficient)

    @classmethod
    def build(cls, value):
        """Coerce a LinearExpression, Variable, number, {Variable: coef}
        mapping or iterable of (Variable, coef) pairs into a new expression."""
        expression = cls._coerce(value)
        if expression is None:
            raise TypeError(
                f"Cannot build a linear expression from {type(value).__name__}"
            )
        return expression

    @classmethod
    def _coerce(cls, value):
        if isinstance(value, LinearExpression):
            return value.copy()
        if isinstance(value, Variable):
            return cls([(value, 1.0)])
        if isinstance(value, numbers.Real):
            return cls(constant=value)
        if isinstance(value, Mapping):
            return cls(value)
        if isinstance(value, (str, bytes)):
            return None
        try:
            return cls(list(value))
        except (TypeError, ValueError):
            return None

    def copy(self):
        return LinearExpression(self.terms, self.constant)

    def variables(self):
        return list(self.terms)

    @property
    def is_constant(self):
        return all(coefficient == 0 for coefficient in self.terms.values())

    def coefficient(self, variable):
        return self.terms.get(variable, 0.0)

    def value(self, values: Mapping[str, float]) -> float:
        """Evaluate the expression for values keyed by variable name."""
        return self.constant + sum(
            coefficient * values[variable.name]
            for variable, coefficient in self.terms.items()
            if coefficient != 0
        )

    def __add__(self, other):
        other = LinearExpression._coerce(other)
        if other is None:
            return NotImplemented
        result = self.copy()
        for variable, coefficient in other.terms.items():
            result.add_term(variable, coefficient)
        result.constant += other.constant
        return result

    __radd__ = __add__

    def __sub__(self, other):
        other = LinearExpression._coerce(other)
        if other is None:
            return NotImplemented
        return self + other * -1

    def __rsub__(self, other):
        other = LinearExpression._coerce(other)
        if other is None:
            return NotImplemented
        return other + self * -1

    def __mul__(self, factor):
        if not isinstance(factor, numbers.Real):
            return NotImplemented
        factor = float(factor)
        return LinearExpression(
            {variable: coefficient * factor for variable, coefficient in self.terms.items()},
            self.constant * factor,
        )

    __rmul__ = __mul__

    def __truediv__(self, divisor):
        if not isinstance(divisor, numbers.Real):
            return NotImplemented
        return self * (1.0 / float(divisor))

    def __neg__(self):
        return self * -1

    def render(self):
        parts = []
        for variable, coefficient in self.terms.items():
            if coefficient == 0:
                continue
            magnitude = abs(coefficient)
            term = variable.name if magnitude == 1 else f"{_format_number(magnitude)} {variable.name}"
            parts.append(("-" if coefficient < 0 else "+", term))
        if self.constant or not parts:
            parts.append(("-" if self.constant < 0 else "+", _format_number(abs(self.constant))))

        sign, term = parts[0]
        text = f"-{term}" if sign == "-" else term
        for sign, term in parts[1:]:
            text += f" {sign} {term}"
        return text

    def __repr__(self):
        return f"LinearExpression({self.render()!r})"


@dataclass(frozen=True, eq=False)
class Constraint:
    expression: LinearExpression
    operator: Operator
    rhs: float
    name: Optional[str] = None

    def bounds(self) -> Tuple[Optional[float], Optional[float]]:
        """Bounds on the variable part of the expression (constant moved to the rhs)."""
        rhs = self.rhs - self.expression.constant
        if self.operator is Operator.LE:
            return None, rhs
        if self.operator is Operator.GE:
            return rhs, None
        return rhs, rhs

    def slack(self, values: Mapping[str, float]) -> float:
        """Distance to the boundary; negative when the constraint is violated."""
        difference = self.rhs - self.expression.value(values)
        if self.operator is Operator.LE:
            return difference
        if self.operator is Operator.GE:
            return -difference
        return -abs(difference)

    def is_satisfied(self, values: Mapping[str, float], tol=1e-6) -> bool:
        return self.slack(values) >= -tol

    def render(self):
        text = f"{self.expression.render()} {self.operator.value} {_format_number(self.rhs)}"
        if self.name is not None:
            return f"{self.name}: {text}"
        return text


@dataclass(frozen=True, eq=False)
class Objective:
    expression: LinearExpression
    sense: Sense = Sense.MINIMIZE

    def value(self, values: Mapping[str, float]) -> float:
        return self.expression.value(values)

    def render(self):
        return f"{self.sense.value} {self.expression.render()}"


@dataclass
class Solution:
    """
    Outcome of one solve. Objective value and variable values are only
    present when the status is OPTIMAL.
    """

    status: Status
    objective_value: Optional[float] = None
    values: Optional[Dict[str, float]] = None
    solver: str = ""
    message: str = ""

    @property
    def is_optimal(self):
        return self.status is Status.OPTIMAL

    def value(self, variable):
        if not self.is_optimal:
            raise SolutionUnavailableError(
                f"No variable values are available for a {self.status.value} solution"
            )
        name = variable.name if isinstance(variable, Variable) else variable
        return self.values[name]

    def __getitem__(self, variable):
        return self.value(variable)

    def report(self):
        lines = [f"status: {self.status.value}"]
        if self.is_optimal:
            lines.append(f"objective: {_format_number(self.objective_value)}")
            for name, value in self.values.items():
                lines.append(f"{name} = {_format_number(value)}")
        elif self.message:
            lines.append(f"message: {self.message}")
        return "\n".join(lines)


class SolverAdapter(abc.ABC):
    """An external LP/MIP solver reached through some Python binding."""

    name = "solver"

    @abc.abstractmethod
    def solve(self, model: "Model") -> Solution:
        """Solve the model and return a Solution with the mapped status."""

    def _solution(self, model, status, values=None, message=""):
        if status is not Status.OPTIMAL:
            return Solution(status, solver=self.name, message=message)
        values = {variable.name: values[variable.name] for variable in model.variables}
        return Solution(
            status,
            objective_value=model.objective.value(values),
            values=values,
            solver=self.name,
            message=message,
        )

    @staticmethod
    def _rows(model):
        """Constraints with at least one nonzero coefficient."""
        return [
            constraint for constraint in model.constraints
            if not constraint.expression.is_constant
        ]

    @staticmethod
    def _trivially_infeasible(model):
        """True when a constraint without variables is violated, e.g. 0 >= 1."""
        return any(
            constraint.slack({}) < -1e-9
            for constraint in model.constraints
            if constraint.expression.is_constant
        )

    @staticmethod
    def _fallback_value(variable):
        # value for a variable the solver did not report, clipped into its bounds
        return min(max(0.0, variable.lb), variable.ub)


class Model:
    """
    A linear program built incrementally. Variables and constraints keep
    their insertion order; failed additions leave the model unchanged.
    """

    def __init__(self, name="model"):
        self.name = name
        self._variables: Dict[str, Variable] = {}
        self._constraints: List[Constraint] = []
        self._constraint_names = set()
        self._objective = Objective(LinearExpression(), Sense.MINIMIZE)

    @property
    def variables(self) -> List[Variable]:
        return list(self._variables.values())

    @property
    def constraints(self) -> List[Constraint]:
        return list(self._constraints)

    @property
    def objective(self) -> Objective:
        return self._objective

    def variable(self, name) -> Variable:
        try:
            return self._variables[name]
        except KeyError:
            raise UnknownVariableError(
                f"Variable {name!r} is not declared in model {self.name!r}"
            ) from None

    def __contains__(self, variable):
        return self._variables.get(variable.name) is variable

    def _new_variable(self, name, lb, ub, domain):
        if not isinstance(name, str) or not name:
            raise ValueError("A variable name must be a non-empty string")
        lb = _to_bound(lb, -math.inf)
        ub = _to_bound(ub, math.inf)
        if math.isnan(lb) or math.isnan(ub):
            raise InvalidBoundsError(f"Bounds of {name!r} must not be NaN")
        if lb == math.inf or ub == -math.inf:
            raise InvalidBoundsError(
                f"Bounds of {name!r} leave no feasible value: lb={lb}, ub={ub}"
            )
        if lb > ub:
            raise InvalidBoundsError(
                f"Lower bound {lb} of {name!r} is greater than its upper bound {ub}"
            )
        return Variable(name, lb, ub, Domain(domain))

    def add_variable(self, name, lb=-math.inf, ub=math.inf, domain=Domain.CONTINUOUS) -> Variable:
        if name in self._variables:
            raise DuplicateNameError(f"Variable {name!r} is already declared")
        variable = self._new_variable(name, lb, ub, domain)
        self._variables[name] = variable
        return variable

    def add_variables(self, names: Iterable[str], lb=-math.inf, ub=math.inf,
                      domain=Domain.CONTINUOUS) -> List[Variable]:
        """Add several variables sharing bounds and domain; all or nothing."""
        names = list(names)
        seen = set()
        for name in names:
            if name in self._variables or name in seen:
                raise DuplicateNameError(f"Variable {name!r} is already declared")
            seen.add(name)
        variables = [self._new_variable(name, lb, ub, domain) for name in names]
        for variable in variables:
            self._variables[variable.name] = variable
        return variables

    def _checked(self, expression):
        expression = LinearExpression.build(expression)
        for variable in expression.terms:
            if variable not in self:
                raise UnknownVariableError(
                    f"Variable {variable.name!r} is not declared in model {self.name!r}"
                )
        return expression

    def set_objective(self, expression, sense=Sense.MINIMIZE):
        sense = Sense.parse(sense)
        self._objective = Objective(self._checked(expression), sense)

    def add_constraint(self, expression, operator, rhs=0.0, name=None) -> Constraint:
        expression = self._checked(expression)
        operator = Operator.parse(operator)
        if name is not None and name in self._constraint_names:
            raise DuplicateNameError(f"Constraint {name!r} is already declared")
        constraint = Constraint(expression, operator, float(rhs), name)
        self._constraints.append(constraint)
        if name is not None:
            self._constraint_names.add(name)
        return constraint

    def solve(self, solver: SolverAdapter) -> Solution:
        logger.debug(
            "Solving %r with %s: %d variables, %d constraints",
            self.name, solver.name, len(self._variables), len(self._constraints),
        )
        solution = solver.solve(self)
        logger.debug("Model %r solved with status %s", self.name, solution.status.value)
        return solution

    def is_feasible(self, values: Mapping[str, float], tol=1e-6) -> bool:
        """Check an assignment, keyed by variable name, against bounds, domains and constraints."""
        for variable in self._variables.values():
            value = values[variable.name]
            if value < variable.lb - tol or value > variable.ub + tol:
                return False
            if variable.is_integer and abs(value - round(value)) > tol:
                return False
        return all(constraint.is_satisfied(values, tol) for constraint in self._constraints)

    def render(self) -> str:
        lines = [self._objective.render(), "subject to"]
        lines.extend(f"  {constraint.render()}" for constraint in self._constraints)
        lines.append("bounds")
        lines.extend(f"  {_render_bounds(variable)}" for variable in self._variables.values())
        integers = [variable.name for variable in self._variables.values() if variable.is_integer]
        if integers:
            lines.append("general")
            lines.append("  " + " ".join(integers))
        return "\n".join(lines)

    __str__ = render

    def __repr__(self):
        return (
            f"Model({self.name!r}, variables={len(self._variables)}, "
            f"constraints={len(self._constraints)})"
        )

    def to_arrays(self):
        """
        Return (lb, ub, A, b, Aeq, beq, c) such that the model reads
        opt c*x, A x <= b, Aeq x = beq, lb <= x <= ub. Rows with >= are negated
        and expression constants are moved to the right-hand side; the
        objective constant is dropped.
        """
        variables = self.variables
        position = {variable: j for j, variable in enumerate(variables)}
        n = len(variables)

        def row(expression, sign=1.0):
            a = np.zeros(n)
            for variable, coefficient in expression.terms.items():
                a[position[variable]] = sign * coefficient
            return a

        A, b, Aeq, beq = [], [], [], []
        for constraint in self._constraints:
            rhs = constraint.rhs - constraint.expression.constant
            if constraint.operator is Operator.EQ:
                Aeq.append(row(constraint.expression))
                beq.append(rhs)
            elif constraint.operator is Operator.LE:
                A.append(row(constraint.expression))
                b.append(rhs)
            else:
                A.append(row(constraint.expression, -1.0))
                b.append(-rhs)

        lb = np.array([variable.lb for variable in variables], dtype="float")
        ub = np.array([variable.ub for variable in variables], dtype="float")
        c = row(self._objective.expression)
        return (
            lb,
            ub,
            np.array(A, dtype="float").reshape(len(A), n),
            np.array(b, dtype="float"),
            np.array(Aeq, dtype="float").reshape(len(Aeq), n),
            np.array(beq, dtype="float"),
            c,
        )

    @classmethod
    def from_arrays(cls, lb, ub, A=None, b=None, c=None, Aeq=None, beq=None,
                    sense=Sense.MAXIMIZE, name="model", prefix="x"):
        """Build the model opt c*x, s.t. A x <= b, Aeq x = beq, lb <= x <= ub.

        Keyword arguments:
        lb -- lower bounds of the variables, i.e., a n-dimensional vector
        ub -- upper bounds of the variables, i.e., a n-dimensional vector
        A, b -- inequality constraints, a mxn matrix and a m-dimensional vector
        c -- the linear objective function, i.e., a n-dimensional vector
        Aeq, beq -- equality constraints
        """
        lb = np.asarray(lb, dtype="float")
        ub = np.asarray(ub, dtype="float")
        n = lb.size
        if ub.size != n:
            raise ValueError("The number of lower bounds must be equal to the number of upper bounds.")

        model = cls(name)
        variables = [model.add_variable(f"{prefix}{j}", lb[j], ub[j]) for j in range(n)]

        def expression(a):
            a = np.asarray(a, dtype="float")
            if a.size != n:
                raise ValueError("Every constraint row must have one coefficient per variable.")
            return LinearExpression((variables[j], a[j]) for j in range(n) if abs(a[j]) > 1e-10)

        for matrix, rhs, operator in ((A, b, Operator.LE), (Aeq, beq, Operator.EQ)):
            if matrix is None:
                continue
            matrix = np.atleast_2d(np.asarray(matrix, dtype="float"))
            rhs = np.asarray(rhs, dtype="float")
            if matrix.shape[0] != rhs.size:
                raise ValueError("The number of rows must be equal to the size of the right-hand side.")
            for i in range(matrix.shape[0]):
                model.add_constraint(expression(matrix[i]), operator, rhs[i])

        if c is not None:
            model.set_objective(expression(c), sense)
        return model


def _render_bounds(variable):
    lower = not math.isinf(variable.lb)
    upper = not math.isinf(variable.ub)
    if lower and upper:
        if variable.lb == variable.ub:
            return f"{variable.name} = {_format_number(variable.lb)}"
        return f"{_format_number(variable.lb)} <= {variable.name} <= {_format_number(variable.ub)}"
    if lower:
        return f"{variable.name} >= {_format_number(variable.lb)}"
    if upper:
        return f"{variable.name} <= {_format_number(variable.ub)}"
    return f"{variable.name} free"
