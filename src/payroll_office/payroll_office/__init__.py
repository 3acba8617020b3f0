"""Payroll Office package.

Organized by feature modules (employees, salary_structures, payroll,
salary_slips) with a thin Flask controller layer over service/repository
layers.
"""
