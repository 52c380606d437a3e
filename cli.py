# cli.py - interactive menu over the cartbill API
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.billclient import BillClient

console = Console()
c = BillClient(base_url=os.getenv("CARTBILL_API_URL", "http://127.0.0.1:3000/api"))
CURRENCY = os.getenv("CURRENCY_SYMBOL", "₹")

status_message = "Ready"
product_cache: List[Dict[str, Any]] = []

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
})


def _error_text(e: Exception) -> str:
    # surface the API's {"error": ...} body when there is one
    resp = getattr(e, "response", None)
    if resp is not None:
        try:
            return f"HTTP {resp.status_code}: {resp.json().get('error', resp.text)}"
        except ValueError:
            return f"HTTP {resp.status_code}: {resp.text}"
    return str(e)


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="Products",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("Item Code", style="bold", width=16)
    table.add_column("Description", width=36)
    table.add_column("Unit", width=8)
    table.add_column("Price", justify="right", width=12)

    for p in products:
        table.add_row(
            str(p.get("itemCode", p.get("id", "N/A"))),
            str(p.get("description", "")),
            str(p.get("unit", "")),
            f"{CURRENCY}{float(p.get('price', 0) or 0):,.2f}",
        )
    console.print(table)


def show_bill_request(items: List[Dict[str, Any]]):
    table = Table(box=box.SIMPLE, header_style="bold blue")
    table.add_column("#", justify="right", width=4)
    table.add_column("Item Code", width=16)
    table.add_column("Qty", justify="right", width=8)
    for idx, it in enumerate(items, start=1):
        table.add_row(str(idx), it["itemCode"], str(it["qty"]))
    console.print(Panel(table, title="Bill items", border_style="blue"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner. Returns the result, or None
    after printing the error.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {_error_text(e)}"
        console.print(show_status(status_message, False))
        return None


# ---------------------------
# Input helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        product_cache = try_api(c.list_products) or []
    return WordCompleter([str(p.get("id", "")) for p in product_cache if p.get("id")], ignore_case=True)


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_price(message: str, default: str = "") -> Optional[float]:
    while True:
        raw = Prompt.ask(message, default=default)
        if raw == "":
            return None
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)
    header.add_row(
        "cartbill",
        "[bold blue]Products & Invoices[/bold blue]",
        f"[dim]{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Actions
# ---------------------------
def create_product():
    global product_cache
    code = prompt_with_autocomplete("Item code").strip()
    if not code:
        console.print("[red]Item code is required[/red]")
        return
    description = Prompt.ask("Description", default="")
    unit = Prompt.ask("Unit", default="")
    price = ask_price("Price", default="0") or 0
    resp = try_api(c.create_product, code, description, unit, price, success_msg=f"Product '{code}' saved")
    if resp:
        show_products([resp])
        product_cache = []


def update_product():
    code = prompt_with_autocomplete("Item code", completer=get_product_completer()).strip()
    console.print("[dim]Leave a field blank to keep it[/dim]")
    fields: Dict[str, Any] = {}
    description = Prompt.ask("Description", default="")
    if description:
        fields["description"] = description
    unit = Prompt.ask("Unit", default="")
    if unit:
        fields["unit"] = unit
    price = ask_price("Price")
    if price is not None:
        fields["price"] = price
    resp = try_api(c.update_product, code, success_msg=f"Product '{code}' updated", **fields)
    if resp:
        show_products([resp])


def delete_product():
    global product_cache
    code = prompt_with_autocomplete("Item code", completer=get_product_completer()).strip()
    if Confirm.ask(f"[red]Delete product '{code}'?[/red]"):
        if try_api(c.delete_product, code, success_msg=f"Product '{code}' deleted"):
            product_cache = []


def download_bill():
    items: List[Dict[str, Any]] = []
    console.print("[dim]Enter item codes one by one; leave blank to finish[/dim]")
    while True:
        code = prompt_with_autocomplete("Item code", completer=get_product_completer()).strip()
        if not code:
            break
        qty = Prompt.ask("Quantity", default="1")
        items.append({"itemCode": code, "qty": qty})
    if not items:
        console.print("[yellow]No items, nothing to bill[/yellow]")
        return
    show_bill_request(items)

    meta = {
        "invoiceNo": Prompt.ask("Invoice No", default=""),
        "customer": Prompt.ask("Customer", default=""),
    }
    meta = {k: v for k, v in meta.items() if v}
    out_dir = Path(Prompt.ask("Save to directory", default="."))
    resp = try_api(c.download_bill, items, meta, dest=str(out_dir))
    if resp:
        filename, content = resp
        console.print(show_status(f"Saved {out_dir / filename} ({len(content)} bytes)", True))


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global product_cache

    console.clear()
    console.print(create_header())
    product_cache = try_api(c.list_products) or []

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        for row in (
            ("1", "List products", "4", "Update product"),
            ("2", "Get product", "5", "Delete product"),
            ("3", "Create product", "6", "Download bill"),
            ("", "", "q", "Quit"),
        ):
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 7)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_products, success_msg="Products loaded")
            if products is not None:
                product_cache = products
                show_products(products)
        elif choice == "2":
            code = prompt_with_autocomplete("Item code", completer=get_product_completer()).strip()
            resp = try_api(c.get_product, code)
            if resp:
                show_products([resp])
        elif choice == "3":
            create_product()
        elif choice == "4":
            update_product()
        elif choice == "5":
            delete_product()
        elif choice == "6":
            download_bill()
        elif choice.lower() in ("q", "quit", "exit"):
            console.print(Panel.fit("[bold green]Bye[/bold green]"))
            return

        console.print()
        console.rule(style="dim")


def main():
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
