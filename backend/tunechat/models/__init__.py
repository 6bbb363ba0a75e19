"""ORM Models — SQLAlchemy declarative models for users, chat and catalog.

Invariants:
    - All models inherit from Base (db/base.py)
    - chat_messages.user_id is not a foreign key: the assistant's reserved id
      has no users row

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
"""

from tunechat.models.user import User  # noqa: F401
from tunechat.models.chat_message import ChatMessage  # noqa: F401
from tunechat.models.song import Song  # noqa: F401
from tunechat.models.album import Album  # noqa: F401
