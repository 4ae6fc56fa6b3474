"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all() runs
  2. Other modules can import from streaming_accounts.models directly
"""

from streaming_accounts.models.user import User, UserRole, UserStatus  # noqa: F401
from streaming_accounts.models.account_security import AccountSecurity  # noqa: F401
from streaming_accounts.models.session import UserSession  # noqa: F401
from streaming_accounts.models.activity_log import ActivityLogEntry, UserAction  # noqa: F401
from streaming_accounts.models.profile import UserProfile  # noqa: F401
from streaming_accounts.models.preferences import UserPreferences, VideoQuality  # noqa: F401
