"""
DCA App - Recurring Purchase Scheduling and Backtest Engine

Computes when the next periodic asset purchase should run for a recurrence
rule anchored to a civil timezone, and replays recurrence rules against
historical price data to estimate dollar-cost averaging performance.
"""

__version__ = "0.1.0"
__author__ = "DCA Team"
