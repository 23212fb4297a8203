"""Responsive Set tool — breakpoint renditions plus <picture> markup for one image."""

from site_toolbox.tools.responsive_set.tool import ResponsiveSetTool

__all__ = ["ResponsiveSetTool"]
