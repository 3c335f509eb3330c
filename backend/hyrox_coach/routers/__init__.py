"""API routers package."""

from hyrox_coach.routers import programs, user_program

__all__ = ["programs", "user_program"]
