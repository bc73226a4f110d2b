from lpmodel import Model, get_solver, available_backends

# All the variables are declared, with a name and optionally a lower and/or upper bound.
model = Model("tutorial")
x = model.add_variable("x", 0, 10)
y = model.add_variable("y", 0, 6)

# A constraint is constructed from an expression of variables, an operator and a right-hand side.
model.add_constraint(2 * x + 4 * y, "<=", 32)

# An objective can be formulated
model.set_objective(30 * x + 20 * y, "max")

print(model.render())
print("----------")

# The same model is solved by every backend
for backend in available_backends():
    solution = model.solve(get_solver(backend))
    print(backend)
    print(solution.report())
    print("----------")
