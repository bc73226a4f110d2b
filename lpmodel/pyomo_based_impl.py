import logging
import math

import pyomo.environ as pyo
from pyomo.common.errors import ApplicationError
from pyomo.opt import TerminationCondition

from .model import Domain, Sense, SolverAdapter, Status

logger = logging.getLogger(__name__)

solver_name = "appsi_highs"

_STATUS = {
    TerminationCondition.optimal: Status.OPTIMAL,
    TerminationCondition.infeasible: Status.INFEASIBLE,
    TerminationCondition.unbounded: Status.UNBOUNDED,
}


def _default_solver():
    return solver_name


def _bound(value):
    return None if math.isinf(value) else value


class PyomoSolver(SolverAdapter):
    """Solve a Model with a Pyomo ConcreteModel and any solver known to
    `pyomo.environ.SolverFactory` (appsi_highs by default, glpk, cbc, ...).
    """

    name = "pyomo"

    def __init__(self, solver_name=None, time_limit=None):
        self.solver_name = solver_name if solver_name is not None else _default_solver()
        self.time_limit = time_limit

    def build(self, model):
        variables = model.variables
        position = {variable: j for j, variable in enumerate(variables)}
        rows = self._rows(model)

        m = pyo.ConcreteModel(name=str(model.name))

        def bounds_rule(m, j):
            return _bound(variables[j].lb), _bound(variables[j].ub)
        m.x = pyo.Var(range(len(variables)), bounds=bounds_rule)
        for j, variable in enumerate(variables):
            if variable.domain is Domain.INTEGER:
                m.x[j].domain = pyo.Integers

        def linear(expression):
            return sum(coefficient * m.x[position[variable]]
                       for variable, coefficient in expression.terms.items())

        # constraints
        def row_rule(m, i):
            lb, ub = rows[i].bounds()
            return (lb, linear(rows[i].expression), ub)
        m.rows = pyo.Constraint(range(len(rows)), rule=row_rule)

        sense = pyo.maximize if model.objective.sense is Sense.MAXIMIZE else pyo.minimize
        m.obj = pyo.Objective(expr=linear(model.objective.expression), sense=sense)

        return m

    def solve(self, model):
        if self._trivially_infeasible(model):
            return self._solution(model, Status.INFEASIBLE, message="constant constraint violated")

        m = self.build(model)
        options = {}
        if self.time_limit is not None:
            options["timelimit"] = self.time_limit

        try:
            opt = pyo.SolverFactory(self.solver_name)
            if not opt.available(exception_flag=False):
                logger.warning("Pyomo solver %s is not available", self.solver_name)
                return self._solution(model, Status.ERROR, message=f"{self.solver_name} is not available")
            results = opt.solve(m, load_solutions=False, **options)
        except (ApplicationError, RuntimeError) as e:
            logger.warning("Pyomo solver %s failed: %s", self.solver_name, e)
            return self._solution(model, Status.ERROR, message=str(e))

        condition = results.solver.termination_condition
        logger.debug("Pyomo %s finished with termination condition %s", self.solver_name, condition)
        status = _STATUS.get(condition, Status.ERROR)
        if status is not Status.OPTIMAL:
            return self._solution(model, status, message=str(condition))

        m.solutions.load_from(results)
        values = {}
        for j, variable in enumerate(model.variables):
            value = m.x[j].value
            values[variable.name] = self._fallback_value(variable) if value is None else value
        return self._solution(model, status, values, str(condition))
