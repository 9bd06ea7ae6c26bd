# === FILE: scouter/config.py ===
"""
Модуль для загрузки и валидации конфигурации Scouter.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from scouter.crawler.models import Priority
from scouter.domain_control import DomainControl
from scouter.scoring import DEFAULT_DECAY_FACTOR, validate_decay_factor

__all__ = [
    "CrawlOptions",
    "FetcherConfig",
    "EvaluatorConfig",
    "ScouterConfig",
    "load_config",
]


class CrawlOptions(BaseModel):
    """Лимиты и пороги планировщика обхода."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_pages: int = Field(50, ge=1, description="Жесткий лимит хранимых страниц.")
    max_crawled_pages: Optional[int] = Field(
        None, ge=1, description="Число страниц, после которого обход останавливается (по умолчанию max_pages)."
    )
    max_concurrent_crawls: int = Field(5, ge=1, description="Одновременных загрузок страниц.")
    max_low_priority_streak: int = Field(3, ge=1, description="Подряд слабых ссылок до остановки.")
    minimum_link_score: float = Field(2.0, ge=0, description="Оценка ссылки, считающаяся слабой.")
    min_pages_before_streak: int = Field(1, ge=0, description="Страниц до начала учета серии слабых ссылок.")
    high_score_threshold: float = Field(3.5, ge=0, description="Порог сильной ссылки в очереди.")
    min_high_score_links: int = Field(10, ge=1, description="Сильных ссылок, при которых оценка ссылок пропускается.")
    decay_factor: float = Field(DEFAULT_DECAY_FACTOR, description="Затухание оценки на каждый шаг глубины.")
    max_depth: Optional[int] = Field(None, ge=0, description="Максимальная глубина обхода ссылок.")
    min_target_score: float = Field(0.0, ge=0, description="Ссылки с оценкой не выше порога не ставятся в очередь.")
    domain_control: DomainControl = Field(default_factory=DomainControl)

    @field_validator("decay_factor")
    @classmethod
    def _check_decay(cls, v: float) -> float:
        return validate_decay_factor(v)

    @model_validator(mode="after")
    def _default_crawled_pages(self) -> CrawlOptions:
        if self.max_crawled_pages is None:
            # frozen model: bypass __setattr__
            object.__setattr__(self, "max_crawled_pages", self.max_pages)
        elif self.max_crawled_pages > self.max_pages:
            # stored pages never exceed max_pages, so a larger value never stops the crawl
            raise ValueError(
                f"max_crawled_pages ({self.max_crawled_pages}) must not exceed max_pages ({self.max_pages})"
            )
        return self


class FetcherConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    timeout: float = Field(10.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; ScouterBot/1.0)", min_length=1, description="Заголовок User-Agent."
    )
    rate_limit: float = Field(5.0, gt=0, description="Лимит запросов в секунду.")
    retry_times: int = Field(2, ge=0, description="Число повторных попыток при 5xx.")
    retry_backoff: float = Field(1.0, ge=0, description="База экспоненциальной задержки между попытками (секунд).")


class EvaluatorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    model: str = Field("gpt-4o-mini", min_length=1)
    base_url: Optional[str] = Field(
        None, description="OpenAI-совместимый endpoint, например http://localhost:11434/v1 для Ollama."
    )
    api_key_env: str = Field("OPENAI_API_KEY", description="Переменная окружения с API-ключом.")
    timeout: float = Field(30.0, gt=0)
    content_chars: int = Field(2000, ge=100, description="Сколько символов страницы отправлять на оценку.")
    temperature: float = Field(0.0, ge=0, le=2)


class ScouterConfig(BaseModel):
    """Конфигурация для одного поиска."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    search_url: str = Field(
        "https://www.google.com/search?q={query}", description="Шаблон URL поисковой выдачи."
    )
    seed_urls: List[str] = Field(default_factory=list, description="Дополнительные стартовые URL.")
    relevant_priority: Priority = Field(Priority.HIGH, description="Минимальный приоритет релевантной страницы.")
    crawl: CrawlOptions = Field(default_factory=CrawlOptions)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    evaluator: EvaluatorConfig = Field(default_factory=EvaluatorConfig)

    @field_validator("search_url")
    @classmethod
    def _check_placeholder(cls, v: str) -> str:
        if "{query}" not in v:
            raise ValueError("search_url must contain a '{query}' placeholder")
        return v

    @field_validator("relevant_priority", mode="before")
    @classmethod
    def _parse_priority(cls, v: Any) -> Any:
        return Priority.parse(v)


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


def load_config(path: Union[str, Path, None]) -> ScouterConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ScouterConfig.
    Без пути берет configs/default.yaml, а если его нет, значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return ScouterConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return ScouterConfig(**data)
