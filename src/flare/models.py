"""
Load option models with validation.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .exceptions import InvalidFormatError


class FileFormat(str, Enum):
    """Supported configuration file formats."""
    JSON = "json"
    TOML = "toml"
    YAML = "yaml"
    AUTO = "auto"

    @classmethod
    def parse(cls, token: Union[str, "FileFormat"]) -> "FileFormat":
        """Resolve a format token, raising InvalidFormatError when unknown."""
        if isinstance(token, FileFormat):
            return token
        try:
            return cls(str(token).lower())
        except ValueError:
            raise InvalidFormatError(str(token)) from None

    @classmethod
    def detect(cls, path: Union[str, Path]) -> "FileFormat":
        """Detect a format from the file extension, defaulting to JSON."""
        suffix = Path(path).suffix.lower()
        if suffix == ".toml":
            return cls.TOML
        if suffix in (".yaml", ".yml"):
            return cls.YAML
        return cls.JSON


class FileSource(BaseModel):
    """A configuration file to load."""
    model_config = ConfigDict(frozen=True)

    path: Path
    required: bool = True
    format: FileFormat = FileFormat.AUTO

    @field_validator('format', mode='before')
    @classmethod
    def validate_format(cls, v):
        """Accept format tokens case-insensitively."""
        if isinstance(v, str) and not isinstance(v, FileFormat):
            return v.lower()
        return v

    def resolved_format(self) -> FileFormat:
        if self.format is FileFormat.AUTO:
            return FileFormat.detect(self.path)
        return self.format


class EnvSource(BaseModel):
    """Environment variable source settings."""
    model_config = ConfigDict(frozen=True)

    prefix: str
    separator: str = Field(default="_", min_length=1)
    environ: Optional[Dict[str, str]] = Field(
        default=None,
        description="Explicit environment mapping; the process environment is used when omitted",
    )
    dotenv_path: Optional[Path] = Field(
        default=None,
        description="Optional .env file layered underneath the environment",
    )


class CliSource(BaseModel):
    """Raw command-line arguments to load."""
    model_config = ConfigDict(frozen=True)

    args: List[str] = Field(default_factory=list)


class LoadOptions(BaseModel):
    """All sources of a load, applied files -> environment -> CLI."""
    model_config = ConfigDict(frozen=True)

    files: List[FileSource] = Field(default_factory=list)
    env: Optional[EnvSource] = None
    cli: Optional[CliSource] = None

    @field_validator('files', mode='before')
    @classmethod
    def validate_files(cls, v):
        """Allow bare paths as shorthand for required files."""
        if v is None:
            return []
        return [FileSource(path=item) if isinstance(item, (str, Path)) else item for item in v]
