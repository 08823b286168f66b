"""
eventadmin package.

In-process publish/subscribe event admin:
- Topic-filtered subscriber registry with ranking order
- Synchronous and thread-pool backed asynchronous delivery
- Per-subscriber fault isolation
"""

__version__ = "0.1.0"
