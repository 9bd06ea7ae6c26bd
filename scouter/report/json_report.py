# scouter/report/json_report.py

"""
Генерация JSON-отчёта для проекта Scouter.

Сериализация объекта ScoutResult в файл.
"""
import json
from pathlib import Path

from scouter.engine import ScoutResult


def render_json(result: ScoutResult, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет результат поиска в формате JSON по указанному пути.

    :param result: объект ScoutResult
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from scouter.report.json_report import render_json
    report_path = render_json(result, 'reports/report.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
