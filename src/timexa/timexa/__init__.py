"""Timexa time-tracking backend.

This package is organized by feature modules (users, attendance, verification, mailer)
with a thin Flask controller layer over service/repository layers.
"""
