"""
Core business logic services.

Layer-pure services that depend only on:
- stockmaster/core/entities/*
- stockmaster/core/interfaces/*
- stockmaster/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockmaster.core.services.dashboard import DashboardService
from stockmaster.core.services.lifecycle import OperationLifecycleService
from stockmaster.core.services.reference_sequencer import (
    ReferenceSequencer,
    format_reference,
    next_reference,
    parse_sequence,
)
from stockmaster.core.services.state_machine import (
    build_movements,
    movements_for_transition,
    resolve_transition,
)
from stockmaster.core.services.stock_aggregator import StockAggregator

__all__ = [
    # Stock
    "StockAggregator",
    # Lifecycle
    "OperationLifecycleService",
    "resolve_transition",
    "build_movements",
    "movements_for_transition",
    # References
    "ReferenceSequencer",
    "format_reference",
    "next_reference",
    "parse_sequence",
    # Dashboard
    "DashboardService",
]
