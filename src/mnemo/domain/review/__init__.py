# Domain Review Package
from .models import ReviewEvent, ReviewState, StudyItem
from .ports import ReviewRepository

__all__ = ["ReviewState", "ReviewEvent", "StudyItem", "ReviewRepository"]
