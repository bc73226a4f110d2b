# lpmodel : a python library for building and solving linear programs

# Copyright (c) 2024 Ke Shi

# Licensed under GNU LGPL.3

from .backends import available_backends, get_solver
from .exceptions import (
    DuplicateNameError,
    InvalidBoundsError,
    ModelError,
    SolutionUnavailableError,
    UnknownVariableError,
)
from .model import (
    Constraint,
    Domain,
    LinearExpression,
    Model,
    Objective,
    Operator,
    Sense,
    Solution,
    SolverAdapter,
    Status,
    Variable,
)

__all__ = [
    "available_backends",
    "get_solver",
    "DuplicateNameError",
    "InvalidBoundsError",
    "ModelError",
    "SolutionUnavailableError",
    "UnknownVariableError",
    "Constraint",
    "Domain",
    "LinearExpression",
    "Model",
    "Objective",
    "Operator",
    "Sense",
    "Solution",
    "SolverAdapter",
    "Status",
    "Variable",
]
