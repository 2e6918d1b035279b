"""
Authentication feature module.

Login, the Principal snapshot, and the session lifecycle around it.
"""
