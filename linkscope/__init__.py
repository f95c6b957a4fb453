"""Link discovery core: navigation model, extraction pipeline, form filling, and scope."""

from .config import DiscoveryConfig, ScopeConfig, load_config, save_config
from .document import Document, Element, SoupDocument, parse_document
from .fetcher import FetchError, Fetcher
from .formfill import DEFAULT_FORM_FILL_DATA, FormFillData, FormFiller, fill_suggestions
from .parsers import ExtractionStrategy, default_strategies
from .pipeline import ExtractionPipeline
from .scope import ScopeError, ScopeManager
from .types import FormInput, NavigationRequest, NavigationResponse, RequestSource
from .url import (
    extract_relative_endpoints,
    parse_link_header,
    parse_refresh,
    resolve_url,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_FORM_FILL_DATA",
    "DiscoveryConfig",
    "Document",
    "Element",
    "ExtractionPipeline",
    "ExtractionStrategy",
    "FetchError",
    "Fetcher",
    "FormFillData",
    "FormFiller",
    "FormInput",
    "NavigationRequest",
    "NavigationResponse",
    "RequestSource",
    "ScopeConfig",
    "ScopeError",
    "ScopeManager",
    "SoupDocument",
    "default_strategies",
    "extract_relative_endpoints",
    "fill_suggestions",
    "load_config",
    "parse_document",
    "parse_link_header",
    "parse_refresh",
    "resolve_url",
    "save_config",
]
