"""Documents app package.

Versioned legal documents with expiry tracking, and the per-property
resource library (photos, floor plans, brochures, links).
"""
