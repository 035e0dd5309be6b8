"""MediaHub - media library core.

Baseline index, content hashing, atomic placement, detection and import of
new media from sources, hash coverage maintenance and duplicate reporting.
"""

__version__ = "0.1.0"
