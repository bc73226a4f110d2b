# lpmodel : a python library for building and solving linear programs

# Copyright (c) 2024 Ke Shi

# Licensed under GNU LGPL.3

import importlib
import os

DEFAULT_BACKEND = "pulp"

_BACKENDS = {
    "pulp": ("lpmodel.pulp_based_impl", "PulpSolver"),
    "optlang": ("lpmodel.optlang_based_implementations", "OptlangSolver"),
    "pyomo": ("lpmodel.pyomo_based_impl", "PyomoSolver"),
}


def available_backends():
    return sorted(_BACKENDS)


def get_solver(name=None, **options):
    """Return a solver adapter for the backend `name`.

    Without a name the LPMODEL_BACKEND environment variable is used, falling
    back to PuLP. Keyword options are passed to the adapter's constructor.
    Only the chosen backend's library is imported.
    """
    if name is None:
        name = os.environ.get("LPMODEL_BACKEND", DEFAULT_BACKEND)
    key = name.strip().lower()
    try:
        module_name, class_name = _BACKENDS[key]
    except KeyError:
        raise ValueError(
            f"Unknown solver backend {name!r}; expected one of {available_backends()}"
        ) from None
    module = importlib.import_module(module_name)
    return getattr(module, class_name)(**options)
