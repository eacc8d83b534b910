"""
pathling-connect

Bulk FHIR export/import pipeline handlers and query workbench state for a
Pathling analytics server.
"""

__version__ = "0.1.0"
