# JustTheChip Core Module
from .catalog import Catalog, CatalogError, load_default_catalog
from .diagnostics import CuttingWarning, DiagnosticLog, Severity
from .models import CalculationRequest, CalculationResult, Machine, Material, Spindle
from .solver import SpeedsFeedsSolver, build_request
from .tools import Tool, tool_from_dict
from .validation import ConfigurationError, ValidationReport, validate_request

__all__ = [
    "Catalog",
    "CatalogError",
    "load_default_catalog",
    "CuttingWarning",
    "DiagnosticLog",
    "Severity",
    "CalculationRequest",
    "CalculationResult",
    "Machine",
    "Material",
    "Spindle",
    "SpeedsFeedsSolver",
    "build_request",
    "Tool",
    "tool_from_dict",
    "ConfigurationError",
    "ValidationReport",
    "validate_request",
]
