"""Routing — a mutable tree of named routes with vetoable transitions.

Routes are registered during setup; the tree itself is static afterwards
and only the active chain and each route's last match change at runtime.
"""
