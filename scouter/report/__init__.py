# File: scouter/report/__init__.py
"""scouter.report: Генерация отчётов (JSON и HTML) по результату поиска."""

from .html_report import render_html
from .json_report import render_json

__all__ = ["render_json", "render_html"]
