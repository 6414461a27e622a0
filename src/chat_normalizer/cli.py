"""
CLI интерфейс для Chat Normalizer.

Использование:
    chat-normalizer normalize message.md
    chat-normalizer preview message.md
    chat-normalizer attachments list message.md
    chat-normalizer attachments show message.md notes.txt
    chat-normalizer config set wrap_html false
"""

import sys
import os
import json
import logging
from pathlib import Path
from typing import Optional

# Windows кодировка
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markdown import Markdown

from chat_normalizer.attachments import AttachmentIndex, parse_reference
from chat_normalizer.config import get_config_manager
from chat_normalizer.exceptions import AttachmentNotFoundError, NormalizerError
from chat_normalizer.pipeline import Normalizer

console = Console()


def error(message: str) -> None:
    """Вывести ошибку."""
    console.print(f"[red]✗[/red] {message}")


def success(message: str) -> None:
    """Вывести успех."""
    console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    """Вывести информацию."""
    console.print(f"[blue]ℹ[/blue] {message}")


def get_normalizer(ctx, **overrides) -> Normalizer:
    """Получить нормализатор с сохранённой конфигурацией и флагами командной строки."""
    config = get_config_manager(ctx.obj.get("config_dir")).get_config()
    changes = {k: v for k, v in overrides.items() if v is not None}
    if changes:
        config = config.model_copy(update=changes)
    return Normalizer(config)


def attachments_table(records) -> Table:
    table = Table(title="Вложения")
    table.add_column("#", style="dim", width=3)
    table.add_column("Имя", style="cyan")
    table.add_column("Тип")
    table.add_column("Размер", justify="right")
    table.add_column("Позиция", style="dim")

    for i, record in enumerate(records, 1):
        start, end = record.source_span
        table.add_row(
            str(i),
            record.file_name,
            record.file_type,
            f"{record.size_kb_label} KB",
            f"{start}-{end}"
        )
    return table


@click.group()
@click.option(
    "--config-dir",
    envvar="CHAT_NORMALIZER_CONFIG_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    help="Директория конфигурации (по умолчанию: ~/.chat_normalizer)"
)
@click.option("--verbose", "-v", is_flag=True, help="Подробный лог")
@click.pass_context
def main(ctx, config_dir: Optional[Path], verbose: bool):
    """Chat Normalizer - подготовка текста сообщений чата к рендерингу markdown."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir


# ===== NORMALIZE COMMANDS =====

@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--json", "as_json", is_flag=True, help="Вывести результат в JSON")
@click.option("--no-attachments", is_flag=True, help="Не извлекать вложения")
@click.option("--no-escape", is_flag=True, help="Не переводить \\( \\) и \\[ \\]")
@click.option("--no-think", is_flag=True, help="Не сворачивать блок <think>")
@click.option("--no-html", is_flag=True, help="Не оборачивать HTML в ```html")
@click.pass_context
def normalize(ctx, source, as_json: bool, no_attachments: bool, no_escape: bool,
              no_think: bool, no_html: bool):
    """Нормализовать сообщение и вывести текст."""
    normalizer = get_normalizer(
        ctx,
        enable_attachment_links=False if no_attachments else None,
        escape_brackets=False if no_escape else None,
        format_think=False if no_think else None,
        wrap_html=False if no_html else None,
    )
    message = normalizer.normalize(source.read())

    if as_json:
        payload = message.model_dump(exclude={"source"})
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        click.echo(message.text, nl=False)


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def preview(ctx, source):
    """Показать нормализованное сообщение в терминале."""
    message = get_normalizer(ctx).normalize(source.read())

    console.print(Panel(
        Markdown(message.text),
        title="Сообщение",
        border_style="green"
    ))
    if message.attachments:
        console.print(attachments_table(message.attachments))


# ===== ATTACHMENT COMMANDS =====

@main.group()
def attachments():
    """Работа с вложениями."""
    pass


@attachments.command("list")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def attachments_list(ctx, source):
    """Показать вложения сообщения."""
    message = get_normalizer(ctx, enable_attachment_links=True).normalize(source.read())

    if not message.attachments:
        info("Нет вложений")
        return

    console.print(attachments_table(message.attachments))


@attachments.command("show")
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.argument("name")
@click.pass_context
def attachments_show(ctx, source, name: str):
    """Вывести содержимое вложения по имени файла."""
    message = get_normalizer(ctx, enable_attachment_links=True).normalize(source.read())

    try:
        record = AttachmentIndex(message.attachments, message.source).find_by_name(name)
    except AttachmentNotFoundError:
        available = ", ".join(r.file_name for r in message.attachments) or "-"
        error(f"Вложение '{name}' не найдено. Доступные: {available}")
        sys.exit(1)

    body = message.recover(record)
    if body is None:
        error(f"Не удалось восстановить содержимое: {name}")
        sys.exit(1)
    click.echo(body)


@attachments.command("resolve")
@click.argument("href")
def attachments_resolve(href: str):
    """Разобрать ссылку file:// на вложение."""
    try:
        ref = parse_reference(href)
    except NormalizerError as e:
        error(e.message)
        sys.exit(1)

    table = Table(show_header=False)
    table.add_column("Параметр", style="cyan")
    table.add_column("Значение")
    table.add_row("Имя", ref.file_name)
    table.add_row("Тип", ref.file_type)
    table.add_row("Размер", f"{ref.file_size_bytes:,.0f} байт")
    console.print(table)


# ===== CONFIG COMMANDS =====

@main.group()
def config():
    """Управление настройками конвейера."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx):
    """Показать текущие настройки."""
    manager = get_config_manager(ctx.obj.get("config_dir"))

    table = Table(title="Настройки")
    table.add_column("Параметр", style="cyan")
    table.add_column("Значение")
    for name, value in manager.as_dict().items():
        table.add_row(name, str(value))

    console.print(table)
    info(f"Файл: {manager.config_file}")


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx, key: str, value: str):
    """Изменить параметр (например: wrap_html false)."""
    try:
        manager = get_config_manager(ctx.obj.get("config_dir"))
        updated = manager.set_option(key, value)
        success(f"{key} = [bold]{getattr(updated, key)}[/bold]")
    except NormalizerError as e:
        error(e.message)
        sys.exit(1)


@config.command("reset")
@click.pass_context
def config_reset(ctx):
    """Сбросить настройки к значениям по умолчанию."""
    get_config_manager(ctx.obj.get("config_dir")).reset()
    success("Настройки сброшены")


if __name__ == "__main__":
    main()
