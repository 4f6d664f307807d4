# JustTheChip Configuration Module
from .machining_config import (
    MachiningConfig, config, ToolMaterial, Coating, HolderType
)
from .catalog_data import CATALOG_DATA

__all__ = [
    "MachiningConfig", "config", "ToolMaterial", "Coating", "HolderType",
    "CATALOG_DATA"
]
