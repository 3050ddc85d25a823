"""Clients for external services.

Each client wraps the errors of its SDK or transport into ``SystemFault``s
with a stable ``(component, operation)`` pair per call site. The Google Cloud
clients require the ``gcp`` extra::

    pip install dusted-utils[gcp]
"""
