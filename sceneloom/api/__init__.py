"""
Preview API for rendered scenes.

``state`` is importable without FastAPI; ``server`` builds the application.
"""
