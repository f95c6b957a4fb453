"""Extraction strategy exports and the default registry."""

from ..formfill import FormFiller
from .base import Emit, ExtractionStrategy
from .forms import FormStrategy
from .headers import (
    HeaderStrategy,
    content_location_strategy,
    link_strategy,
    location_strategy,
    refresh_strategy,
)
from .scripts import JSFileStrategy, ScriptContentStrategy
from .tags import (
    MetaRefreshStrategy,
    TagAttributeStrategy,
    anchor_strategy,
    button_formaction_strategy,
    embed_strategy,
    frame_strategy,
    iframe_strategy,
    input_image_strategy,
    isindex_strategy,
    script_src_strategy,
)


def default_strategies(filler: FormFiller | None = None) -> list[ExtractionStrategy]:
    """Build the standard strategy list in its fixed run order."""

    return [
        # Header based
        content_location_strategy(),
        link_strategy(),
        location_strategy(),
        refresh_strategy(),
        # Body based
        anchor_strategy(),
        embed_strategy(),
        frame_strategy(),
        iframe_strategy(),
        input_image_strategy(),
        isindex_strategy(),
        script_src_strategy(),
        button_formaction_strategy(),
        FormStrategy(filler),
        MetaRefreshStrategy(),
        # Optional JS endpoint mining
        ScriptContentStrategy(),
        JSFileStrategy(),
    ]


__all__ = [
    "Emit",
    "ExtractionStrategy",
    "FormStrategy",
    "HeaderStrategy",
    "JSFileStrategy",
    "MetaRefreshStrategy",
    "ScriptContentStrategy",
    "TagAttributeStrategy",
    "default_strategies",
]
