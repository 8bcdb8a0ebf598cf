# === FILE: site_qa/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SiteQA через командную строку.

Команды:
  sitemap ROOT_URL  Развернуть sitemap (или sitemap-индекс) в отсортированный список URL
  scan              Просканировать страницы из urls.txt в headless-браузере
  config            Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда sitemap опции:
  --output PATH       Записать список в файл вместо stdout
  --dedupe            Удалить повторяющиеся URL

Команда scan опции:
  --urls PATH         Файл со списком URL (default: $URLS_FILE или urls_file из конфига)
  --output-dir DIR    Папка для артефактов и отчётов
  --json PATH         Путь JSON-отчёта (default: <output-dir>/report.json)
  --html PATH         Путь HTML-отчёта (default: <output-dir>/index.html)
  --template DIR      Папка со своим report.html.j2
  --workers INT       Число одновременных сканов
  --pretty/--compact  JSON-отчёт с отступами (default) или одной строкой

Код выхода scan равен 1 только при жёстких сбоях (конфиг, браузер, потеря сессии);
проваленные мягкие проверки на код выхода не влияют.

Пример:
  site-qa sitemap https://example.com/sitemap.xml > urls.txt
  site-qa scan --workers 4
"""
import asyncio
import os
import sys
from pathlib import Path

import click

from site_qa import __version__
from site_qa.config import load_config
from site_qa.crawler.resolver import resolve_sitemap
from site_qa.engine import start_scan
from site_qa.exceptions import SiteQAError
from site_qa.logger import DEFAULT_FORMAT, init_logging
from site_qa.report.html_report import render_html
from site_qa.report.json_report import render_json
from site_qa.utils import read_url_list

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteQA, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
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
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteQA CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('sitemap', context_settings=CONTEXT_SETTINGS)
@click.argument('root_url')
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Записать список URL в файл'
)
@click.option(
    '--dedupe/--keep-duplicates', 'dedupe',
    default=None,
    help='Удалять повторяющиеся URL (default: dedupe_urls из конфига)'
)
@click.pass_context
def sitemap(ctx, root_url, output, dedupe):
    """Развернуть sitemap ROOT_URL в отсортированный список страниц."""
    cfg = ctx.obj['config']
    try:
        urls = asyncio.run(resolve_sitemap(root_url, cfg, dedupe=dedupe))
    except SiteQAError as e:
        print_error(str(e))

    text = '\n'.join(urls)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + '\n' if text else '', encoding='utf-8')
        click.echo(f'{len(urls)} URLs written to {output}', err=True)
    else:
        click.echo(text)


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--urls', '-u', 'urls_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Файл со списком URL'
)
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Папка для артефактов и отчётов'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь JSON-отчёта'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь HTML-отчёта'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка со своим report.html.j2'
)
@click.option(
    '--workers', '-w', 'workers',
    type=click.IntRange(min=1),
    default=None,
    help='Число одновременных сканов (override workers)'
)
@click.option(
    '--pretty/--compact', 'pretty',
    default=True,
    show_default=True,
    help='JSON-отчёт с отступами или одной строкой'
)
@click.pass_context
def scan(ctx, urls_file, output_dir, json_output, html_output, template_dir, workers, pretty):
    """Просканировать страницы и сгенерировать отчёты."""
    cfg = ctx.obj['config']
    updates = {}
    if output_dir is not None:
        updates['output_dir'] = output_dir
    if workers is not None:
        updates['workers'] = workers
    if updates:
        cfg = cfg.model_copy(update=updates)

    urls_path = urls_file or Path(os.environ.get('URLS_FILE') or cfg.urls_file)
    try:
        urls = read_url_list(urls_path)
    except OSError as e:
        print_error(f'Не удалось прочитать список URL: {e}')
    if not urls:
        print_error(f'Список URL пуст: {urls_path}')

    click.echo(f'Scanning {len(urls)} URLs from {urls_path}', err=True)
    try:
        report = asyncio.run(start_scan(cfg, urls))
    except Exception as e:
        print_error(f'Ошибка при сканировании: {e}')

    for page in report.pages:
        if not page.record.scanned:
            mark = click.style('ERROR', fg='red', bold=True)
        elif page.report.passed:
            mark = click.style('PASS', fg='green')
        else:
            mark = click.style('FAIL', fg='yellow')
        failed = ', '.join(a.name for a in page.report.failures)
        click.echo(f'{mark} [{page.record.project}] {page.record.url}' + (f' ({failed})' if failed else ''))

    json_path = json_output or cfg.output_dir / 'report.json'
    html_path = html_output or cfg.output_dir / 'index.html'
    try:
        click.echo(f'JSON report: {render_json(report, json_path, pretty=pretty)}', err=True)
        click.echo(f'HTML report: {render_html(report, html_path, template_dir)}', err=True)
    except Exception as e:
        print_error(f'Ошибка при сохранении отчёта: {e}')

    summary = report.summary()
    click.echo(
        f"{summary['pages']} pages: {summary['passed']} passed, "
        f"{summary['soft_failures']} with soft failures, {summary['hard_failures']} not scanned"
    )
    if summary['hard_failures']:
        sys.exit(1)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
