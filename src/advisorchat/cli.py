"""Command line interface for the chat client."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ChatConfig, ConfigError, load_config
from .exchange.controller import ExchangeController
from .logging_setup import setup_logging
from .render import (
    ClearWindow,
    RenderInstruction,
    ReplacePlaceholder,
    ShowLatestQuestion,
    ShowMessage,
    ShowPlaceholder,
)

app = typer.Typer(help="Product advisor chat client")
console = Console()

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to YAML configuration")


class ConsoleRenderer:
    """Prints render instructions to a rich console.

    A terminal cannot replace a line that has scrolled away, so placeholder
    replacements are printed as new assistant lines.
    """

    def __init__(self, out: Console) -> None:
        self.console = out

    def render(self, instruction: RenderInstruction) -> None:
        if isinstance(instruction, ClearWindow):
            self.console.clear()
        elif isinstance(instruction, ShowMessage):
            if instruction.sender == "user":
                self.console.print(f"[bold cyan]you[/] {escape(instruction.text)}", highlight=False)
            else:
                self._assistant(instruction.text)
        elif isinstance(instruction, ShowLatestQuestion):
            self.console.print(instruction.text, style="dim", markup=False, highlight=False)
        elif isinstance(instruction, ShowPlaceholder):
            self.console.print(instruction.text, style="dim italic", markup=False, highlight=False)
        elif isinstance(instruction, ReplacePlaceholder):
            self._assistant(instruction.text)

    def _assistant(self, text: str) -> None:
        self.console.print("[bold magenta]advisor[/]", end=" ")
        self.console.print(text, markup=False, highlight=False)


def _load(config_path: Optional[Path]) -> ChatConfig:
    try:
        config = load_config(config_path)
    except (ConfigError, OSError) as exc:
        console.print(f"[red]Invalid configuration:[/] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    setup_logging(config.logging.level, config.logging.file)
    return config


async def _chat_loop(config: ChatConfig) -> None:
    async with ExchangeController(config, renderer=ConsoleRenderer(console)) as controller:
        controller.start()
        console.print("[dim]/clear resets the conversation, /quit exits[/]")
        while True:
            try:
                text = console.input("[bold cyan]> [/]")
            except (EOFError, KeyboardInterrupt):
                break
            command = text.strip().lower()
            if command in {"/quit", "/exit"}:
                break
            if command == "/clear":
                controller.clear(confirm=lambda prompt: typer.confirm(prompt, default=False))
                continue
            with console.status("[cyan]thinking...", spinner="dots"):
                await controller.submit(text)


@app.command()
def chat(config_path: Optional[Path] = CONFIG_OPTION) -> None:
    """Start an interactive conversation."""

    config = _load(config_path)
    asyncio.run(_chat_loop(config))


@app.command()
def ask(
    text: str = typer.Argument(..., help="Question to send"),
    config_path: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Send a single question and print the answer."""

    config = _load(config_path)

    async def run_once():
        async with ExchangeController(config) as controller:
            return await controller.submit(text)

    outcome = asyncio.run(run_once())
    if outcome.error is not None:
        console.print(outcome.error.user_message, style="red", markup=False, highlight=False)
        raise typer.Exit(code=1)
    if outcome.reply is not None:
        console.print(outcome.reply, markup=False, highlight=False)


@app.command()
def inspect(config_path: Optional[Path] = CONFIG_OPTION) -> None:
    """Print the effective configuration."""

    config = _load(config_path)
    table = Table(title=f"Configuration: {config.name}", show_lines=True)
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in config.describe().items():
        table.add_row(key, value)
    console.print(table)


if __name__ == "__main__":  # pragma: no cover
    app()
