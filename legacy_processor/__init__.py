"""Legacy challenge processor.

Projects challenge create/update notifications onto the legacy
component schema.
"""

__version__ = "1.0.0"
