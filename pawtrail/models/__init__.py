# pawtrail/models/__init__.py
from .user import User
from .dog import Dog
from .walk import Walk, WalkEvent, WalkEventType
from .feeding import Feeding, MealType, Portion
from .activity import ActivityItem, ActivityType

__all__ = [
    'User', 'Dog',
    'Walk', 'WalkEvent', 'WalkEventType',
    'Feeding', 'MealType', 'Portion',
    'ActivityItem', 'ActivityType',
]
