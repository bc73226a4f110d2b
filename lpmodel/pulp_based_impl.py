# lpmodel : a python library for building and solving linear programs

# Copyright (c) 2024 Ke Shi

# Licensed under GNU LGPL.3

import logging
import math

import numpy as np
import pulp as pl

from .model import Domain, Model, Operator, Sense, SolverAdapter, Status

logger = logging.getLogger(__name__)

solver_name = "HiGHS"

_STATUS = {
    pl.LpStatusOptimal: Status.OPTIMAL,
    pl.LpStatusInfeasible: Status.INFEASIBLE,
    pl.LpStatusUnbounded: Status.UNBOUNDED,
}


def _default_solver():
    return solver_name


def _bound(value):
    return None if math.isinf(value) else value


def dot(expression, x):
    """Translate a linear expression into a PuLP affine expression over the
    PuLP variables x; the constant term is left out.
    """
    return pl.LpAffineExpression(
        (x[variable], coefficient)
        for variable, coefficient in expression.terms.items()
        if coefficient != 0
    )


class PulpSolver(SolverAdapter):
    """Solve a Model with the PuLP LP modeler and any solver PuLP can reach
    through `pulp.getSolver` (HiGHS by default, PULP_CBC_CMD, GUROBI, ...).
    """

    name = "pulp"

    def __init__(self, solver_name=None, msg=False, time_limit=None, **options):
        self.solver_name = solver_name if solver_name is not None else _default_solver()
        self.msg = msg
        self.time_limit = time_limit
        self.options = options

    def build(self, model):
        """Create the PuLP problem of the model. Returns the problem and the
        mapping from model variables to PuLP variables."""

        sense = pl.LpMaximize if model.objective.sense is Sense.MAXIMIZE else pl.LpMinimize
        problem = pl.LpProblem(str(model.name).replace(" ", "_"), sense)

        # Create variables and set lb <= x <= ub
        x = {
            variable: pl.LpVariable(
                f"x{j}",
                lowBound=_bound(variable.lb),
                upBound=_bound(variable.ub),
                cat=pl.LpInteger if variable.domain is Domain.INTEGER else pl.LpContinuous,
            )
            for j, variable in enumerate(model.variables)
        }
        problem.addVariables(x.values())

        # Add the constraints, with the expression constant moved to the rhs
        for i, constraint in enumerate(self._rows(model)):
            lhs = dot(constraint.expression, x)
            rhs = constraint.rhs - constraint.expression.constant
            if constraint.operator is Operator.LE:
                problem += (lhs <= rhs, f"c{i}")
            elif constraint.operator is Operator.GE:
                problem += (lhs >= rhs, f"c{i}")
            else:
                problem += (lhs == rhs, f"c{i}")

        # Set the objective function
        problem.setObjective(dot(model.objective.expression, x))

        return problem, x

    def solve(self, model):
        if self._trivially_infeasible(model):
            return self._solution(model, Status.INFEASIBLE, message="constant constraint violated")

        problem, x = self.build(model)
        logger.debug(
            "PuLP %s: %d variables, %d constraints",
            self.solver_name, len(x), len(problem.constraints),
        )

        options = dict(self.options)
        if self.time_limit is not None:
            options["timeLimit"] = self.time_limit

        try:
            solver = pl.getSolver(self.solver_name, msg=self.msg, **options)
            problem.solve(solver)
        except pl.PulpSolverError as e:
            logger.warning("PuLP solver %s failed: %s", self.solver_name, e)
            return self._solution(model, Status.ERROR, message=str(e))

        status = _STATUS.get(problem.status, Status.ERROR)
        message = pl.LpStatus.get(problem.status, str(problem.status))
        logger.debug("PuLP %s finished with status %s", self.solver_name, message)
        if status is not Status.OPTIMAL:
            return self._solution(model, status, message=message)

        values = {}
        for variable, var in x.items():
            value = var.value()
            values[variable.name] = self._fallback_value(variable) if value is None else value
        return self._solution(model, status, values, message)


def solve_lp(lb, ub, A, b, c, Aeq=None, beq=None, sense="max", solver_name=None):
    """A Python function to solve a linear program given in array form with PuLP
    Returns an optimal solution and its value for the following linear program:
    max (or min) c*x, subject to,
    Ax <= b, Aeq x = beq, lb <= x <= ub

    Keyword arguments:
    lb -- lower bounds for the variables, i.e., a n-dimensional vector
    ub -- upper bounds for the variables, i.e., a n-dimensional vector
    A -- the mxn matrix of the inequality constraints
    b -- a m-dimensional vector
    c -- the linear objective function, i.e., a n-dimensional vector
    Aeq, beq -- optional equality constraints Aeq x = beq
    sense -- "max" or "min"

    Returns (None, None) when the program has no optimal solution.
    """

    if np.asarray(c).size != np.asarray(lb).size:
        raise ValueError(
            "The length of the linear objective function must be equal to the number of variables."
        )

    model = Model.from_arrays(lb, ub, A, b, c, Aeq, beq, sense=sense, name="LP")
    solution = model.solve(PulpSolver(solver_name))

    if not solution.is_optimal:
        return None, None

    x = np.array([solution.values[variable.name] for variable in model.variables])
    return x, solution.objective_value
