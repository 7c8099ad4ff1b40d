"""Lambda handlers. Each module is deployed alone as ``handler.py``."""
