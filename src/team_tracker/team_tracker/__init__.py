"""Team Tracker package.

This package is organized by feature modules (sessions, reporting, users, ...)
with a thin Flask controller layer on top of service/repository layers.
"""
