"""ResponsiveSetTool — BaseTool wrapper for the responsive image set builder."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from site_toolbox.codec import PillowTranscoder, Transcoder
from site_toolbox.core.base_tool import BaseTool, ToolParameter
from site_toolbox.core.datatypes import ResponsiveSet
from site_toolbox.core.events import EventBus
from site_toolbox.core.exceptions import ValidationError
from site_toolbox.tools.responsive_set.logic import DEFAULT_URL_PREFIX, build_responsive_set, validate_scale


class ResponsiveSetTool(BaseTool):
    """Generate AVIF/WebP/JPEG renditions of one image and its ``<picture>`` markup."""

    name = "responsive_set"
    display_name = "Responsive Image Set"
    description = "Encode breakpoint renditions of an image and emit <picture> markup"
    version = "0.1.0"
    category = "Image"

    def __init__(self, event_bus: EventBus | None = None, transcoder: Transcoder | None = None) -> None:
        """Initialise the tool.

        Args:
            event_bus: Shared event bus for log and progress reporting.
            transcoder: Codec backend; ``PillowTranscoder`` when omitted.
        """
        super().__init__(event_bus=event_bus)
        self.transcoder = transcoder or PillowTranscoder()

    def define_parameters(self) -> list[ToolParameter]:
        """Return the parameter schema for the builder."""
        return [
            ToolParameter(
                name="source",
                label="Source image",
                type=Path,
                required=True,
                help="Image file to convert. Renditions are written next to it.",
            ),
            ToolParameter(
                name="scale_percent",
                label="Scale percent",
                type=int,
                default=100,
                min_value=1,
                help="Percentage applied to every rendition width.",
            ),
            ToolParameter(
                name="url_prefix",
                label="URL prefix",
                type=str,
                default=DEFAULT_URL_PREFIX,
                help="Public URL directory the renditions are served from.",
            ),
            ToolParameter(
                name="alt",
                label="Alt text",
                type=str,
                default="",
                help="Alternative text for the <img> element.",
            ),
            ToolParameter(
                name="legacy_sizes",
                label="Legacy sizes",
                type=bool,
                default=False,
                help="Reproduce the sizes/srcset trimming of previously generated pages.",
            ),
        ]

    def validate(self, params: dict[str, Any]) -> None:
        """Validate parameters; non-positive scales raise ``InvalidScaleError``.

        Args:
            params: Parameter dict to validate.

        Raises:
            InvalidScaleError: If ``scale_percent`` is not a positive integer.
            ValidationError: If ``source`` is missing.
        """
        validate_scale(params.get("scale_percent", 100))
        super().validate(params)
        if not str(params.get("url_prefix", DEFAULT_URL_PREFIX)):
            msg = "Parameter 'url_prefix' must not be empty"
            raise ValidationError(msg)

    def _do_execute(self, params: dict[str, Any]) -> ResponsiveSet:
        """Run the builder with the configured transcoder.

        Args:
            params: Validated parameter dictionary.

        Returns:
            The ``ResponsiveSet`` for the source image.
        """
        return build_responsive_set(
            Path(params["source"]),
            params.get("scale_percent", 100),
            transcoder=self.transcoder,
            url_prefix=params.get("url_prefix", DEFAULT_URL_PREFIX),
            alt=params.get("alt", ""),
            legacy_sizes=params.get("legacy_sizes", False),
            event_bus=self.event_bus,
        )
