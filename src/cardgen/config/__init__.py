"""Configuration — defaults, YAML/env hierarchy and validated settings."""

from cardgen.config.hierarchy import load_config_hierarchy
from cardgen.config.schema import Settings, load_settings

__all__ = ["Settings", "load_config_hierarchy", "load_settings"]
