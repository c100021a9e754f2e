"""Users app package.

Back-office accounts, their roles and the role based permission map
used by every API view. ``apps.users.models.CustomUser`` is the
AUTH_USER_MODEL throughout the project.
"""
