"""Interactive session layer.

This module owns the explicit dashboard state, the deferred filter
recomputation primitive, and the load/filter controller.
"""
