"""
UI logic package - portable across platforms.

Grid layout calculations, insertion placement, reflow and the drag/resize
interaction state machine. No UI framework dependencies.
"""
from .grid_layout import GridLayout, calculate_layout
from .allocator import column_ends, next_grid_position, next_position_for_importance
from .reflow import find_first_fit, find_overlaps, reflow
from .interaction import (
    InteractionController,
    InteractionEvent,
    InteractionState,
    PersistenceGateway,
)

__all__ = [
    'GridLayout',
    'calculate_layout',
    'column_ends',
    'next_grid_position',
    'next_position_for_importance',
    'find_first_fit',
    'find_overlaps',
    'reflow',
    'InteractionController',
    'InteractionEvent',
    'InteractionState',
    'PersistenceGateway',
]
