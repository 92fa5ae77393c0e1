"""shiftdesk package.

Shift scheduling and attendance reconciliation, organized by feature modules
(shifts, imports, coverage, timeclock, ...) with a thin Flask JSON controller
layer over service/repository layers.
"""
