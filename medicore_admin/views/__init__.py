"""
View-side helpers: collection bindings and the dashboard summary.
"""

from .bindings import CollectionBinding
from .dashboard import AppointmentRow, DashboardSummary

__all__ = ["CollectionBinding", "DashboardSummary", "AppointmentRow"]
