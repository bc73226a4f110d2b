# lpmodel : a python library for building and solving linear programs

# Copyright (c) 2024 Ke Shi

# Licensed under GNU LGPL.3

import importlib
import logging
import math

import optlang
from optlang import interface as optlang_status
from optlang.symbolics import Zero

from .model import Domain, Sense, SolverAdapter, Status

logger = logging.getLogger(__name__)

_INTERFACES = {
    "glpk": "optlang.glpk_interface",
    "scipy": "optlang.scipy_interface",
    "gurobi": "optlang.gurobi_interface",
    "cplex": "optlang.cplex_interface",
}

_STATUS = {
    optlang_status.OPTIMAL: Status.OPTIMAL,
    optlang_status.INFEASIBLE: Status.INFEASIBLE,
    optlang_status.UNBOUNDED: Status.UNBOUNDED,
}


def _bound(value):
    return None if math.isinf(value) else value


class OptlangSolver(SolverAdapter):
    """Solve a Model using optlang, either with its default interface
    (GLPK when swiglpk is installed) or a named one.
    """

    name = "optlang"

    def __init__(self, interface=None, verbosity=0, time_limit=None):
        if interface is not None and interface not in _INTERFACES:
            raise ValueError(
                f"Unknown optlang interface {interface!r}; expected one of {sorted(_INTERFACES)}"
            )
        self.interface = interface
        self.verbosity = verbosity
        self.time_limit = time_limit

    def _backend(self):
        if self.interface is None:
            return optlang
        return importlib.import_module(_INTERFACES[self.interface])

    def build(self, model, backend):
        opt_model = backend.Model(name=str(model.name))
        opt_model.configuration.verbosity = self.verbosity
        if self.time_limit is not None:
            opt_model.configuration.timeout = self.time_limit

        # Create variables
        x = {
            variable: backend.Variable(
                f"x{j}",
                lb=_bound(variable.lb),
                ub=_bound(variable.ub),
                type="integer" if variable.domain is Domain.INTEGER else "continuous",
            )
            for j, variable in enumerate(model.variables)
        }
        opt_model.add(list(x.values()))

        # Add constraints, then fill in their coefficients
        rows = self._rows(model)
        constraints = []
        for i, row in enumerate(rows):
            lb, ub = row.bounds()
            constraints.append(backend.Constraint(Zero, lb=lb, ub=ub, name=f"c{i}"))
        opt_model.add(constraints)
        opt_model.update()
        for constraint, row in zip(constraints, rows):
            constraint.set_linear_coefficients(
                {x[variable]: coefficient for variable, coefficient in row.expression.terms.items()}
            )

        # Set the objective function in the model
        direction = "max" if model.objective.sense is Sense.MAXIMIZE else "min"
        opt_model.objective = backend.Objective(Zero, direction=direction)
        opt_model.objective.set_linear_coefficients(
            {x[variable]: coefficient for variable, coefficient in model.objective.expression.terms.items()}
        )

        return opt_model, x

    def solve(self, model):
        if self._trivially_infeasible(model):
            return self._solution(model, Status.INFEASIBLE, message="constant constraint violated")

        try:
            backend = self._backend()
        except ImportError as e:
            logger.warning("optlang interface %s is not available: %s", self.interface, e)
            return self._solution(model, Status.ERROR, message=str(e))

        opt_model, x = self.build(model, backend)
        logger.debug(
            "optlang %s: %d variables, %d constraints",
            self.interface or "default", len(x), len(opt_model.constraints),
        )

        status = opt_model.optimize()
        logger.debug("optlang finished with status %s", status)

        mapped = _STATUS.get(status, Status.ERROR)
        if mapped is not Status.OPTIMAL:
            return self._solution(model, mapped, message=str(status))

        values = {}
        for variable, var in x.items():
            value = var.primal
            values[variable.name] = self._fallback_value(variable) if value is None else value
        return self._solution(model, mapped, values, str(status))
