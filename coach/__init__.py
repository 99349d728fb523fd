"""Preflop coach package: scenario drills, baseline strategy, and coaching feedback."""

from coach.service import CoachService
from coach.webapp import create_app

__all__ = ["CoachService", "create_app"]
