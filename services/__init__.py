"""
Services Layer
==============
Business logic between the HTTP layer and the database handler.

Service classes take a db handler and can be used independently of the API.
"""

from .forecast_service import ForecastService
from .budget_service import BudgetService
from .scenario_service import ScenarioService
from .framework_service import FrameworkService

__all__ = [
    'ForecastService',
    'BudgetService',
    'ScenarioService',
    'FrameworkService',
]
