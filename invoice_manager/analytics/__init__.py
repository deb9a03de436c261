"""
Analytics Module for the Invoice Manager.

This module computes views over stored invoices:
    - Dashboard statistics
    - Monthly expense evolution
    - Advanced search filters
"""

from .dashboard_stats import DashboardStats, compute_dashboard_stats
from .expense_evolution import MonthlyData, TIME_RANGES, compute_monthly_evolution
from .search import SearchFilters, filter_invoices, unique_categories, unique_providers

__all__ = [
    'DashboardStats',
    'compute_dashboard_stats',
    'MonthlyData',
    'TIME_RANGES',
    'compute_monthly_evolution',
    'SearchFilters',
    'filter_invoices',
    'unique_categories',
    'unique_providers',
]
