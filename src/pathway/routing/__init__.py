"""Routing — path pattern compiler, routes, and hierarchical routers.

Routes and sub-routers are registered during setup; the tree is frozen
before the first request is dispatched.
"""
