"""Routed screens.  Each view is a ``CTkFrame`` built by a route factory."""
