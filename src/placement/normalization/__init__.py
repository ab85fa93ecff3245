"""Input normalization."""

from .config_resolver import DEFAULT_SUBJECTS, DEFAULT_TRACKS, resolve_effective_config
from .request import normalize_request

__all__ = ["DEFAULT_SUBJECTS", "DEFAULT_TRACKS", "normalize_request", "resolve_effective_config"]
