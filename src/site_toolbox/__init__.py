"""Site Toolbox — build-time helpers for a static personal website."""
