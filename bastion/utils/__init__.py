"""
Bastion - Utilities Package
===========================

Helpers shared by commands, events and services:
duration formatting, DM helpers, HTTP error logging, member resolution
and the error handler.
"""
