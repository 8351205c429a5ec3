"""Configuration management for prfiles."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from prfiles import __version__
from prfiles.exceptions import ConfigError

PRFILES_DIR = ".prfiles"
CONFIG_FILE = "config.json"


class FetchConfig(BaseModel):
    """HTTP settings used when downloading pull request diffs."""

    max_redirects: int = Field(default=10, ge=0)
    timeout: float = Field(default=30.0, gt=0)
    user_agent: str = f"prfiles/{__version__}"


class GitHubConfig(BaseModel):
    """Where the API lives and where its credentials come from."""

    api_base_url: str = "https://api.github.com"
    netrc_path: str = "~/.netrc"
    netrc_machine: str = "api.github.com"

    @property
    def resolved_netrc_path(self) -> Path:
        return Path(self.netrc_path).expanduser()


class ReportConfig(BaseModel):
    """Report output configuration."""

    format: Literal["text", "json"] = "text"
    workers: int = Field(default=1, ge=1)


class ProjectConfig(BaseModel):
    """Full project configuration."""

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)


SECTIONS: dict[str, type[BaseModel]] = {
    "fetch": FetchConfig,
    "github": GitHubConfig,
    "report": ReportConfig,
}


def find_project_root(start: Path | None = None) -> Path | None:
    """Nearest directory at or above `start` holding a .prfiles directory."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / PRFILES_DIR).is_dir():
            return candidate
    return None


def config_path(root: Path) -> Path:
    return root / PRFILES_DIR / CONFIG_FILE


def load_config(root: Path) -> ProjectConfig:
    """Load `root`'s config.json, or defaults if there is none."""
    path = config_path(root)
    if not path.exists():
        return ProjectConfig()
    try:
        return ProjectConfig.model_validate_json(path.read_text())
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def save_config(root: Path, config: ProjectConfig) -> Path:
    """Write only the settings that differ from the defaults."""
    path = config_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2, exclude_defaults=True) + "\n")
    return path


def _section_and_field(key: str) -> tuple[str, str]:
    """Validate a `section.field` key such as 'fetch.timeout'."""
    section, _, name = key.partition(".")
    model = SECTIONS.get(section)
    if model is None or name not in model.model_fields:
        valid = ", ".join(f"{s}.{f}" for s, m in SECTIONS.items() for f in m.model_fields)
        raise KeyError(f"Invalid config key: {key} (expected one of: {valid})")
    return section, name


def get_config_value(config: ProjectConfig, key: str) -> Any:
    section, name = _section_and_field(key)
    return getattr(getattr(config, section), name)


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Return a copy of `config` with `key` set, validated by its section model."""
    section, name = _section_and_field(key)
    current = getattr(config, section)
    try:
        updated = SECTIONS[section].model_validate({**current.model_dump(), name: value})
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
    return config.model_copy(update={section: updated})
