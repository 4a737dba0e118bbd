from typing import Any, Literal, Optional
import json
import os
from pydantic import BaseModel, Field
from loguru import logger

# --- Generic Settings Models ---
class GeneralSettings(BaseModel):
    debug_mode: bool = True
    log_dir: Optional[str] = None  # No file sink when unset

# --- Code Generation Settings ---
class CodegenSettings(BaseModel):
    class_name: str = "GeneratedProgram"
    method_name: str = "execute"
    indent: int = Field(default=4, ge=1, le=8)
    # Raise instead of falling back to a zero value when a connected
    # input cannot be resolved
    strict_pins: bool = False

# --- Build / Packaging Settings ---
class BuildSettings(BaseModel):
    unit_name: str = "GraphScriptGenerated"
    output_dir: Optional[str] = None
    target: Literal["library", "console", "windowed"] = "library"
    write_artifacts: bool = True

class PackagingSettings(BaseModel):
    tool: str = "pyinstaller"
    onefile: bool = True
    timeout_sec: float = 300.0
    keep_scratch: bool = False

class AppConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    codegen: CodegenSettings = Field(default_factory=CodegenSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    packaging: PackagingSettings = Field(default_factory=PackagingSettings)

# --- Manager ---
class ConfigManager:
    """
    Manages application configuration with persistence.
    """
    def __init__(self, filepath: str = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Update a setting, validate via Pydantic and autosave."""
        if section not in AppConfig.model_fields:
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        # ValidationError is a ValueError
        updated = type(section_obj).model_validate({**section_obj.model_dump(), key: value})
        setattr(self._data, section, updated)
        self._save()
        logger.debug(f"Config updated: {section}.{key} = {value!r}")

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML file if present; otherwise keep defaults."""
        if os.path.isfile(self.filepath):
            try:
                if self.filepath.endswith('.toml'):
                    import tomllib
                    with open(self.filepath, "rb") as f:
                        raw = tomllib.load(f)
                else:
                    with open(self.filepath, "r", encoding="utf-8") as f:
                        raw = json.load(f)
                self._data = AppConfig.model_validate(raw)
            except Exception as e:
                logger.error(f"Failed to load config from {self.filepath}: {e}")
                self._save()
        else:
            self._save()

    def _save(self):
        """Persist current config to JSON file."""
        if self.filepath.endswith('.toml'):
            # TOML is read-only; edits stay in memory
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4) # Pydantic v2
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
