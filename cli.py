# cli.py - interactive terminal client for the bakery ledger
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from bakery_ledger.exceptions import LedgerError
from sdk.ledgerclient import LedgerClient

CATEGORIES = ["Bakery", "Cake", "Cookies"]

console = Console()
c = LedgerClient(base_url=os.getenv("LEDGER_URL", "http://127.0.0.1:8085"))

# Global state for status messages and caching
status_message = "Ready"
status_ok = True
product_cache: List[Dict[str, Any]] = []

# Custom prompt style for prompt_toolkit
custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def format_timestamp(ns: Optional[int]) -> str:
    if ns is None:
        return "-"
    return datetime.fromtimestamp(ns / 1e9, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def show_products(products: List[Dict[str, Any]], title: str = "📦 Bakery Stock"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", justify="right", width=6)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Category", width=10)
    table.add_column("Qty", justify="right", width=8)
    table.add_column("Created (UTC)", width=20)
    table.add_column("Updated (UTC)", width=20)

    for p in products:
        qty = p.get("quantity", 0)
        qty_style = "red" if qty == 0 else "green"
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name", "N/A"),
            p.get("category", "N/A"),
            f"[{qty_style}]{qty}[/{qty_style}]",
            format_timestamp(p.get("created_at")),
            format_timestamp(p.get("updated_at")),
        )
    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Ledger errors (NotFound / InvalidOperation) and transport errors are
    reported in the status panel and yield None.
    """
    global status_message, status_ok
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)
    except LedgerError as e:
        status_message = f"{e.kind}: {e.msg}"
        status_ok = False
        console.print(show_status(status_message, False))
        return None
    except Exception as e:
        status_message = f"Error: {e}"
        status_ok = False
        console.print(show_status(status_message, False))
        return None

    if success_msg:
        status_message = success_msg
        status_ok = True
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Autocompletion helpers
# ---------------------------
def refresh_product_cache():
    global product_cache
    product_cache = try_api(c.list_all_products) or []


def get_product_completer():
    if not product_cache:
        refresh_product_cache()
    return WordCompleter([str(p.get("id")) for p in product_cache], ignore_case=True)


def get_category_completer():
    return WordCompleter(CATEGORIES, ignore_case=True)


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🥐 Bakery Ledger",
        "[bold blue]Inventory CLI with Autocomplete[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_product_id() -> Optional[int]:
    raw = prompt_with_autocomplete("Enter product ID", completer=get_product_completer()).strip()
    try:
        return int(raw)
    except ValueError:
        console.print("[red]Product IDs are whole numbers.[/red]")
        return None


def ask_category(default: str = "Bakery") -> str:
    while True:
        raw = prompt_with_autocomplete("🏷️ Category", completer=get_category_completer(), default=default).strip()
        for cat in CATEGORIES:
            if cat.lower() == raw.lower():
                return cat
        console.print(f"[red]Choose one of: {', '.join(CATEGORIES)}[/red]")


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message

    console.clear()
    console.print(create_header())

    # Preload products for autocomplete
    refresh_product_cache()

    while True:
        if status_message:
            console.print(show_status(status_message, status_ok))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "6", "➕ Add stock"),
            ("2", "🔍 Search by category", "7", "➖ Offload stock"),
            ("3", "🆕 Add product", "8", "📊 Get stock"),
            ("4", "ℹ️ Get product by ID", "9", "🗑️ Remove product"),
            ("5", "✏️ Update product", "10", "🔄 Clear all products"),
            ("", "", "q", "👋 Quit")
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 11)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_all_products, success_msg="Products loaded successfully")
            if products is not None:
                show_products(products)

        elif choice == "2":
            category = ask_category()
            res = try_api(c.search_by_category, category, success_msg=f"Search for {category} completed")
            if res is not None:
                show_products(res, title=f"📦 {category}")

        elif choice == "3":
            name = prompt_with_autocomplete("Enter product name")
            qty = IntPrompt.ask("📦 Quantity", default=1)
            category = ask_category()
            resp = try_api(c.add_product, name, qty, category, success_msg=f"Product '{name}' added")
            if resp:
                show_products([resp])
                refresh_product_cache()

        elif choice == "4":
            pid = ask_product_id()
            if pid is not None:
                resp = try_api(c.get_product, pid, success_msg=f"Product {pid} details loaded")
                if resp:
                    show_products([resp])

        elif choice == "5":
            pid = ask_product_id()
            if pid is not None:
                current = try_api(c.get_product, pid) or {}
                name = prompt_with_autocomplete("Enter product name", default=current.get("name", ""))
                qty = IntPrompt.ask("📦 Quantity", default=current.get("quantity", 1))
                category = ask_category(default=current.get("category", "Bakery"))
                resp = try_api(c.update_product, pid, name, qty, category, success_msg=f"Product {pid} updated")
                if resp:
                    show_products([resp])
                    refresh_product_cache()

        elif choice in ("6", "7"):
            pid = ask_product_id()
            if pid is not None:
                amount = IntPrompt.ask("Amount", default=1)
                if choice == "6":
                    resp = try_api(c.add_quantity, pid, amount, success_msg=f"Added {amount} to product {pid}")
                else:
                    resp = try_api(c.offload_quantity, pid, amount, success_msg=f"Offloaded {amount} from product {pid}")
                if resp:
                    show_products([resp])

        elif choice == "8":
            pid = ask_product_id()
            if pid is not None:
                qty = try_api(c.get_stock, pid, success_msg=f"Stock for product {pid} loaded")
                if qty is not None:
                    console.print(Panel.fit(f"📊 [bold]In stock:[/bold] [green]{qty}[/green]", title=f"Product {pid}"))

        elif choice == "9":
            pid = ask_product_id()
            if pid is not None and Confirm.ask(f"Remove product {pid}?"):
                resp = try_api(c.remove_product, pid, success_msg=f"Product {pid} removed")
                if resp:
                    show_products([resp], title="🗑️ Removed")
                    refresh_product_cache()

        elif choice == "10":
            if Confirm.ask("[red]This will delete every product. Continue?[/red]"):
                try_api(c.clear_all_products, success_msg="All products cleared")
                refresh_product_cache()

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Goodbye from the bakery! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
