"""HR workflow service package.

Organized by feature modules (employees, attendance, leaves, resignations,
recruitment, ...) with a thin Flask controller layer over service and
repository layers.
"""
