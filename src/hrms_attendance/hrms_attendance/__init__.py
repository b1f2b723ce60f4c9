"""HRMS attendance package.

Feature modules (punches, attendance, breaks, shifts, ...) follow the same
layout: a thin Flask controller layer over service and repository layers.
"""
