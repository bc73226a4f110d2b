# lpmodel : a python library for building and solving linear programs

# Copyright (c) 2024 Ke Shi

# Licensed under GNU LGPL.3

import unittest

import numpy as np
import pulp as pl

from lpmodel import Domain, Model, Status
from lpmodel.pulp_based_impl import _STATUS, PulpSolver, solve_lp, solver_name


def tutorial_model():
    model = Model("tutorial")
    x = model.add_variable("x", 0, 10)
    y = model.add_variable("y", 0, 6)
    model.add_constraint(2 * x + 4 * y, "<=", 32)
    model.set_objective(30 * x + 20 * y, "max")
    return model


def solver_available(name):
    try:
        return pl.getSolver(name, msg=0).available()
    except pl.PulpSolverError:
        return False


@unittest.skipUnless(solver_available(solver_name), f"{solver_name} is not available")
class TestPulpSolver(unittest.TestCase):
    def test_tutorial_model(self):
        solution = tutorial_model().solve(PulpSolver())

        self.assertEqual(solution.status, Status.OPTIMAL)
        self.assertTrue(abs(solution.objective_value - 360.0) < 1e-06)
        self.assertTrue(abs(solution["x"] - 10.0) < 1e-06)
        self.assertTrue(abs(solution["y"] - 3.0) < 1e-06)
        self.assertEqual(solution.solver, "pulp")

    def test_infeasible(self):
        model = Model()
        x = model.add_variable("x")
        model.add_constraint(x, ">=", 5)
        model.add_constraint(x, "<=", 1)
        model.set_objective(x, "min")

        solution = model.solve(PulpSolver())

        self.assertEqual(solution.status, Status.INFEASIBLE)
        self.assertIsNone(solution.values)
        self.assertIsNone(solution.objective_value)

    def test_unbounded(self):
        # max x + y, x - y <= 1, x, y >= 0
        model = Model()
        x, y = model.add_variables(["x", "y"], 0)
        model.add_constraint(x - y, "<=", 1)
        model.set_objective(x + y, "max")

        solution = model.solve(PulpSolver())

        self.assertEqual(solution.status, Status.UNBOUNDED)
        self.assertIsNone(solution.values)
        self.assertIsNone(solution.objective_value)

    def test_violated_constant_constraint(self):
        model = tutorial_model()
        model.add_constraint(0 * model.variable("x") + 2, "<=", 1)

        self.assertEqual(model.solve(PulpSolver()).status, Status.INFEASIBLE)

    def test_knapsack(self):
        model = Model("knapsack")
        a, b, c = model.add_variables(["a", "b", "c"], 0, 1, Domain.INTEGER)
        model.add_constraint(2 * a + 3 * b + c, "<=", 5)
        model.set_objective(5 * a + 4 * b + 3 * c, "max")

        solution = model.solve(PulpSolver())

        self.assertEqual(solution.status, Status.OPTIMAL)
        self.assertTrue(abs(solution.objective_value - 9) < 1e-06)
        self.assertEqual([round(solution[v]) for v in (a, b, c)], [1, 1, 0])

    def test_objective_constant_and_unused_variable(self):
        model = tutorial_model()
        x, y = model.variables
        z = model.add_variable("z", 1, 4)
        model.set_objective(30 * x + 20 * y + 5, "max")

        solution = model.solve(PulpSolver())

        self.assertTrue(abs(solution.objective_value - 365.0) < 1e-06)
        self.assertTrue(1 - 1e-06 <= solution[z] <= 4 + 1e-06)
        self.assertEqual(list(solution.values), ["x", "y", "z"])


@unittest.skipUnless(solver_available("PULP_CBC_CMD"), "PULP_CBC_CMD is not available")
class TestBundledCbc(unittest.TestCase):
    def test_tutorial_model(self):
        solution = tutorial_model().solve(PulpSolver(solver_name="PULP_CBC_CMD"))

        self.assertEqual(solution.status, Status.OPTIMAL)
        self.assertTrue(abs(solution.objective_value - 360.0) < 1e-06)


class TestPulpTranslation(unittest.TestCase):
    def test_unknown_solver_is_an_error_status(self):
        solution = tutorial_model().solve(PulpSolver("NO_SUCH_SOLVER"))

        self.assertEqual(solution.status, Status.ERROR)
        self.assertTrue(solution.message)

    def test_status_mapping(self):
        self.assertEqual(_STATUS[pl.LpStatusOptimal], Status.OPTIMAL)
        self.assertEqual(_STATUS[pl.LpStatusInfeasible], Status.INFEASIBLE)
        self.assertEqual(_STATUS[pl.LpStatusUnbounded], Status.UNBOUNDED)
        self.assertNotIn(pl.LpStatusNotSolved, _STATUS)

    def test_build(self):
        problem, x = PulpSolver().build(tutorial_model())

        self.assertEqual(problem.sense, pl.LpMaximize)
        self.assertEqual(len(problem.constraints), 1)
        self.assertEqual([var.upBound for var in x.values()], [10, 6])


@unittest.skipUnless(solver_available(solver_name), f"{solver_name} is not available")
class TestSolveLp(unittest.TestCase):
    def test_solve_lp(self):
        x, value = solve_lp(
            lb=np.zeros(2),
            ub=np.array([10.0, 6.0]),
            A=np.array([[2.0, 4.0]]),
            b=np.array([32.0]),
            c=np.array([30.0, 20.0]),
        )

        self.assertTrue(abs(value - 360.0) < 1e-06)
        self.assertTrue(np.allclose(x, [10.0, 3.0]))

    def test_equality_and_minimize(self):
        # min x0 + 2 x1, x0 + x1 = 4, 0 <= x <= 3
        x, value = solve_lp(
            np.zeros(2), 3 * np.ones(2), A=None, b=None, c=np.array([1.0, 2.0]),
            Aeq=np.array([[1.0, 1.0]]), beq=np.array([4.0]), sense="min",
        )

        self.assertTrue(abs(value - 5.0) < 1e-06)
        self.assertTrue(np.allclose(x, [3.0, 1.0]))

    def test_infeasible_returns_none(self):
        x, value = solve_lp(
            np.zeros(1), np.ones(1), A=np.array([[-1.0]]), b=np.array([-2.0]), c=np.ones(1)
        )

        self.assertIsNone(x)
        self.assertIsNone(value)

    def test_objective_dimension(self):
        with self.assertRaises(ValueError):
            solve_lp(np.zeros(2), np.ones(2), None, None, np.ones(3))


if __name__ == "__main__":
    unittest.main()
