"""Importing the models registers their tables with ``Base.metadata``."""

from .session_record import SessionRecord
from .user import User
from .video import Video

__all__ = ["SessionRecord", "User", "Video"]
