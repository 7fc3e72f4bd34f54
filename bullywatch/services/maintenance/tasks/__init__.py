"""
BullyWatch - Maintenance Tasks
==============================
"""

from .temporal_cleanup import TemporalCleanupTask, sweep_temporal_data

__all__ = [
    "TemporalCleanupTask",
    "sweep_temporal_data",
]
