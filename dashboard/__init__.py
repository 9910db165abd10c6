"""Dashboard layer: state container, derived views and the application shell.

Nothing here draws widgets; a front-end renders from ``Store.state`` and the
derived values in ``dashboard.services``.
"""
