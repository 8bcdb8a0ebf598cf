# === FILE: site_qa/config.py ===
"""
Модуль для загрузки и валидации конфигурации SiteQA.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


class ViewportConfig(BaseModel):
    """Размер окна браузера в CSS-пикселях."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(1366, gt=0)
    height: int = Field(900, gt=0)


class ProjectConfig(BaseModel):
    """Browser profile a page list is scanned under (desktop, phone emulation...)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., min_length=1)
    device: Optional[str] = Field(None, description="Имя устройства Playwright, например 'Pixel 7'.")
    viewport: Optional[ViewportConfig] = None


class ScannerConfig(BaseModel):
    """Конфигурация для одного запуска: sitemap-резолвер и диагностика страниц."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    # sitemap resolver
    user_agent: str = Field("site-qa/1.0", min_length=1, description="Заголовок User-Agent.")
    fetch_timeout: float = Field(30.0, gt=0, description="Таймаут на загрузку одного sitemap (секунд).")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx/429.")
    strict_manifests: bool = Field(
        True, description="Считать XML, не похожий на sitemap, ошибкой разбора."
    )
    dedupe_urls: bool = Field(False, description="Удалять дубликаты URL из итогового списка.")

    # page diagnostics
    urls_file: Path = Field(Path("urls.txt"), description="Файл со списком страниц.")
    output_dir: Path = Field(Path("site-qa-report"), description="Папка для артефактов.")
    workers: int = Field(2, ge=1, description="Число одновременно сканируемых страниц.")
    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    ignore_https_errors: bool = True
    browser_user_agent: Optional[str] = Field(
        None, description="User-Agent браузера для проектов без device; None — родной UA движка."
    )
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    projects: List[ProjectConfig] = Field(
        default_factory=lambda: [ProjectConfig(name="desktop")],
        min_length=1,
    )
    navigation_timeout: float = Field(60.0, gt=0, description="Таймаут навигации (секунд).")
    settle_delay: float = Field(3.0, ge=0, description="Пауза перед вторым скриншотом (секунд).")
    diff_threshold: float = Field(0.1, ge=0, le=1, description="Порог отличия пикселя (0..1).")
    axe_script: Optional[Path] = Field(None, description="Путь к axe.min.js.")
    axe_tags: List[str] = Field(default_factory=lambda: ["wcag2a", "wcag2aa"])
    keep_screenshots: bool = Field(False, description="Сохранять оба скриншота как артефакты.")

    @field_validator("axe_tags")
    def _tags_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("axe_tags must contain at least one rule tag")
        return v

    @model_validator(mode="after")
    def _check_unique_projects(self) -> ScannerConfig:
        names = [p.name for p in self.projects]
        if len(names) != len(set(names)):
            raise ValueError(f"project names must be unique: {names}")
        return self

    @model_validator(mode="after")
    def _check_axe_script_exists(self) -> ScannerConfig:
        if self.axe_script is not None and not self.axe_script.expanduser().is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(self.axe_script))
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


_READERS = {".yaml": _read_yaml, ".yml": _read_yaml, ".json": _read_json}


def load_config(path: Union[str, Path, None]) -> ScannerConfig:
    """Собирает ScannerConfig из YAML/JSON-файла.

    ``None`` означает configs/default.yaml в текущей папке; если его нет,
    берутся значения модели. Ошибки схемы приходят как pydantic.ValidationError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return ScannerConfig()
        cfg_path = _DEFAULT_CFG
    else:
        cfg_path = Path(path).expanduser()
        if not cfg_path.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(cfg_path))

    reader = _READERS.get(cfg_path.suffix.lower())
    if reader is None:
        raise ValueError(f"Неподдерживаемый формат конфига: {cfg_path.suffix}")
    return ScannerConfig(**reader(cfg_path))


__all__ = ["ScannerConfig", "ProjectConfig", "ViewportConfig", "load_config"]
