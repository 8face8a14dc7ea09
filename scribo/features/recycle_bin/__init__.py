"""Recycle bin retention"""

from scribo.features.recycle_bin.sweeper import RecycleBinSweeper, retention_cutoff, sweep_expired

__all__ = ["RecycleBinSweeper", "retention_cutoff", "sweep_expired"]
