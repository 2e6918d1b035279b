"""
Permission feature module.

Implements role-based access control over a closed permission catalog: the
role registry, the authorization engine, and the resource guard used by every
protected route.
"""
