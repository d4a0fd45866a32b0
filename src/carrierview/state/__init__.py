"""View state layer.

The store is the single owner of the loaded records, the chart series
derived from them and the free-form view settings.  Everything that
changes what the viewer shows goes through it.
"""

from carrierview.state.store import StateListener, ViewStateStore

__all__ = ["StateListener", "ViewStateStore"]
