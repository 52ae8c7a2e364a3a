"""
Seedline rankings and predictive analytics engine.

Turns a youth-soccer rankings snapshot into filtered leaderboards with
national-rank context, match outcome predictions and map marker layouts.
"""

__version__ = "1.0.0"
