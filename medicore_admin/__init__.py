"""
MediCore Admin Core

Client-side session and data-synchronisation core for the MediCore clinic
administration console.
"""

__version__ = "0.1.0"
