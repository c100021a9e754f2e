"""Properties app package.

Properties and the destinations grouping them. Every other domain app
references :class:`apps.properties.models.Property`.
"""
