"""Engine version stamped on every scoring result.

Bump whenever a field of the per-ticker or batch output is renamed or reshaped.
"""

ENGINE_VERSION = "3.2.0"
