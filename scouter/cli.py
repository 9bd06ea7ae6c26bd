# === FILE: scouter/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска Scouter через командную строку.

Команды:
  search QUERY  Найти страницы по запросу и вывести/сохранить отчёты
  config        Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --limit INT         Макс. число страниц (override crawl.max_pages)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда search опции:
  --json PATH             Сохранить JSON-отчёт в файл
  --html PATH             Сохранить HTML-отчёт в файл
  --template DIR          Папка с Jinja2-шаблоном report.html.j2
  --pretty                Преформатировать JSON-вывод (отступ 2)
  --search-timeout SEC    Таймаут всего поиска (секунд)

Пример:
  scouter --config configs/default.yaml search "swift concurrency actors" --json report.json
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from scouter import __version__
from scouter.config import load_config
from scouter.engine import start_search
from scouter.logger import init_logging, logger
from scouter.report.html_report import render_html
from scouter.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='Scouter, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML или JSON.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число страниц (override crawl.max_pages)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """Группа команд Scouter CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    if limit is not None:
        crawl = cfg.crawl.model_copy(update={'max_pages': limit, 'max_crawled_pages': limit})
        cfg = cfg.model_copy(update={'crawl': crawl})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('search', context_settings=CONTEXT_SETTINGS)
@click.argument('query')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (по умолчанию встроенный)'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--search-timeout', 'search_timeout',
    type=float,
    default=None,
    help='Таймаут всего поиска (секунд)'
)
@click.pass_context
def search(ctx, query, json_output, html_output, template_dir, pretty, search_timeout):
    """Найти страницы по запросу QUERY и сгенерировать отчёты."""
    cfg = ctx.obj['config']
    logger.info('Searching: %s', query)
    try:
        if search_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_search(cfg, query), timeout=search_timeout)
            )
        else:
            result = asyncio.run(start_search(cfg, query))
    except asyncio.TimeoutError:
        print_error(f'Поиск не завершен за {search_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при поиске: {e}')

    # Без файлов отчёта печатаем JSON в stdout
    if not json_output and not html_output:
        indent = 2 if pretty else None
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=indent))
        return

    if json_output:
        try:
            saved_json = render_json(result, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(result, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
