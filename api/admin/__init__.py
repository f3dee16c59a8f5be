"""Admin site registrations for the API app.

This package registers model admins used by Django's admin interface.
"""

from .admin_assignment import *  # noqa: F403
from .admin_attendance import *  # noqa: F403
from .admin_auth import *  # noqa: F403
from .admin_course import *  # noqa: F403
from .admin_progress import *  # noqa: F403
