# File: scouter/report/html_report.py
"""scouter.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from scouter.engine import ScoutResult

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


def render_html(
    result: ScoutResult,
    template_dir: Optional[Union[Path, str]],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        result: объект ScoutResult.
        template_dir: директория с шаблоном ``report.html.j2``;
            None означает встроенный шаблон пакета.
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template("report.html.j2")

    relevant = {p.url for p in result.relevant_pages}
    context: dict[str, Any] = {
        "query": result.query,
        "termination_reason": result.termination_reason.value,
        "duration": result.duration,
        "crawled_urls": result.crawled_urls,
        "pages": [dict(p.to_dict(text_chars=300), relevant=p.url in relevant) for p in result.pages],
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
