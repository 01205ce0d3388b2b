"""
Configuration data models with validation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..plugin_management.plugin_validator import PLUGIN_ID_PATTERN


class LoggingConfiguration(BaseModel):
    """Logging system configuration with validation."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = Field(default="text", pattern="^(json|text)$")
    output: str = Field(default="console", pattern="^(console|file|both)$")
    file_path: Optional[str] = None

    @model_validator(mode='after')
    def validate_file_path(self):
        """Validate file path when file output is used."""
        if self.output in ('file', 'both') and not self.file_path:
            raise ValueError("file_path is required when output is 'file' or 'both'")
        return self


class ContentIntelSettings(BaseModel):
    """
    Settings of the collector, the plugin registry and the bundled data sources.

    `plugin_timeout` is the per-plugin collection budget in seconds; 0 or
    null disables it.
    """
    enabled_plugins: List[str] = Field(default_factory=list)
    plugin_timeout: Optional[float] = Field(default=30.0, ge=0)
    max_concurrent_collections: int = Field(default=4, ge=1, le=64)
    plugin_modules: List[str] = Field(default_factory=list)
    plugin_search_paths: List[str] = Field(default_factory=list)
    use_entry_points: bool = False
    statistics_db: Optional[str] = None
    search_log_db: Optional[str] = None
    content_path: Optional[str] = None
    file_base_url: str = ""
    logging_config: LoggingConfiguration = Field(default_factory=LoggingConfiguration)

    @field_validator('enabled_plugins')
    @classmethod
    def validate_enabled_plugins(cls, v):
        """Validate plugin id format and reject duplicates."""
        for plugin_id in v:
            if not PLUGIN_ID_PATTERN.match(plugin_id):
                raise ValueError(f"Invalid plugin id: {plugin_id}")
        if len(set(v)) != len(v):
            raise ValueError("enabled_plugins contains duplicates")
        return v

    @field_validator('plugin_modules')
    @classmethod
    def validate_plugin_modules(cls, v):
        for module_name in v:
            if not module_name or not all(part.isidentifier() for part in module_name.split('.')):
                raise ValueError(f"Invalid plugin module name: {module_name!r}")
        return v
