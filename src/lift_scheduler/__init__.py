"""
lift-scheduler: rule-based training program generation.

Schedules specialization splits, tracks volume against MEV/MAV/MRV
landmarks, computes progressive-overload targets, expands advanced
techniques into concrete sets and detects plateaus.
"""

__version__ = "0.1.0"
