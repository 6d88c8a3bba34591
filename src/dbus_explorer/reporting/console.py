"""Console reporter for terminal output."""

from __future__ import annotations

import io
import sys
from typing import TextIO

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from dbus_explorer.exploration.result import ExplorationResult, ServiceTree
from dbus_explorer.models import Argument, Interface, Method, ObjectNode, Signal


def _args(args: list[Argument]) -> str:
    return ", ".join(f"{a.signature} {a.name}" if a.name else a.signature for a in args)


def format_method(method: Method) -> str:
    """Render a method as ``Name(in args) -> (out args)``."""
    text = f"{method.name}({_args(method.in_args)})"
    if method.out_args:
        text += f" -> ({_args(method.out_args)})"
    return text


def format_signal(signal: Signal) -> str:
    return f"{signal.name}({_args(signal.args)})"


class ConsoleReporter:
    """Formats an ExplorationResult as a rich tree.

    Example::

        reporter = ConsoleReporter()
        output = reporter.report(result)

        # Or print directly
        reporter.print_report(result)

        # Object paths and interface names only
        reporter = ConsoleReporter(show_members=False, color=False)

    Args:
        file: Output file for print_report (default: stdout).
        color: Whether to emit ANSI colors.
        show_members: Whether to list methods, properties and signals.
        width: Render width in columns.
    """

    def __init__(
        self,
        file: TextIO | None = None,
        color: bool = True,
        show_members: bool = True,
        width: int = 120,
    ) -> None:
        self.file = file or sys.stdout
        self.color = color
        self.show_members = show_members
        self.width = width

    def report(self, result: ExplorationResult) -> str:
        """Format the exploration result as a string."""
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            force_terminal=self.color,
            no_color=not self.color,
            width=self.width,
        )
        for name in result.service_names:
            console.print(self.service_tree(result.services[name]))

        summary = result.summary()
        console.print(
            f"[bold]{summary['services']}[/bold] services, "
            f"[bold]{summary['objects']}[/bold] objects, "
            f"[bold]{summary['failures']}[/bold] failures "
            f"[dim]({summary['duration_ms']}ms)[/dim]"
        )

        failures = result.failures
        if failures:
            console.print("[bold red]Objects with errors[/bold red]")
            for failure in failures:
                console.print(
                    f"  {escape(failure.service)}:{escape(failure.path)} "
                    f"[yellow]{failure.diagnostic.kind.value}[/yellow] "
                    f"{escape(failure.diagnostic.message)}"
                )
        return buffer.getvalue()

    def print_report(self, result: ExplorationResult) -> None:
        self.file.write(self.report(result))

    def service_tree(self, tree: ServiceTree) -> Tree:
        label = f"[bold cyan]{escape(tree.name)}[/bold cyan]"
        if tree.owner:
            label += f" [dim]({escape(tree.owner)})[/dim]"
        if tree.diagnostic:
            label += f" [red]{escape(tree.diagnostic.message)}[/red]"

        rendered = Tree(label)
        self._add_object(rendered, tree.root)
        return rendered

    def _add_object(self, parent: Tree, node: ObjectNode) -> None:
        if node.diagnostic is not None:
            branch = parent.add(
                f"[red]{escape(node.path)}[/red] "
                f"[yellow]\\[{node.diagnostic.kind.value}][/yellow] "
                f"{escape(node.diagnostic.message)}"
            )
        elif node.is_navigation_only:
            label = f"[bold]{escape(node.path)}[/bold]"
            if not node.interfaces:
                label += " [dim](navigation only)[/dim]"
            branch = parent.add(label)
        else:
            branch = parent.add(f"[bold green]{escape(node.path)}[/bold green]")

        for interface in node.interfaces:
            self._add_interface(branch, interface)
        for child in node.children:
            self._add_object(branch, child)

    def _add_interface(self, parent: Tree, interface: Interface) -> None:
        label = f"[magenta]{escape(interface.name)}[/magenta]"
        if interface.description:
            label += f" [dim]{escape(interface.description)}[/dim]"
        branch = parent.add(label)
        if not self.show_members:
            return

        for method in interface.methods:
            text = f"[blue]method[/blue] {escape(format_method(method))}"
            if method.is_deprecated:
                text += " [dim](deprecated)[/dim]"
            branch.add(text)
        for prop in interface.properties:
            branch.add(
                f"[blue]property[/blue] {escape(prop.name)}: {escape(prop.signature)} "
                f"[dim]{prop.access.value}[/dim]"
            )
        for signal in interface.signals:
            branch.add(f"[blue]signal[/blue] {escape(format_signal(signal))}")
