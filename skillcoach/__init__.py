"""
skillcoach - timed behavioral-skill sessions with progress reporting.

Walks a student through a roster of skills separated by per-skill waits,
records yes/no/no-response outcomes, and summarizes success rates for the
supervising adult.
"""

__version__ = "1.0.0"
