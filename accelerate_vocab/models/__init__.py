"""Database models package for Accelerate Vocab."""

from ..db_instance import db

from .user import Group, Profile, User, UserRole
from .content import Module, ModuleAssignment, OnboardingSlide, VocabItem
from .game import GameSession, PairAttempt, SessionAnswer

__all__ = [
    'db',
    'User',
    'Profile',
    'UserRole',
    'Group',
    'Module',
    'ModuleAssignment',
    'VocabItem',
    'OnboardingSlide',
    'GameSession',
    'SessionAnswer',
    'PairAttempt',
]
