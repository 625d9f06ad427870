# main.py

from datetime import datetime

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from farmlog.bootstrap import open_store
from farmlog.catalog import event_type_info
from farmlog.farm_store import FarmStore, StoreChange
from farmlog.notifications import ConsoleNotificationScheduler, dispatch_event_reminder

load_dotenv()
console = Console()


def show_productivity(store: FarmStore, now: datetime):
    table = Table(title="This Week")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Harvest", f"{int(store.weekly_harvest(now))} kg")
    table.add_row("Eggs", f"{store.weekly_eggs(now)}")
    table.add_row("Milk", f"{store.weekly_milk(now):.1f} L")
    table.add_row("Animals", f"{store.total_animal_count()}")
    console.print(table)


def show_tasks(store: FarmStore, now: datetime):
    table = Table(title="Pending Tasks")
    table.add_column("Task", style="cyan")
    table.add_column("Due")
    table.add_column("Priority")
    table.add_column("Category")
    today = now.date()
    for task in store.pending_tasks():
        due = "today" if task.due_date.date() == today else f"{task.due_date:%b %d}"
        table.add_row(task.title, due, task.priority.value, task.category.value)
    console.print(table)


def show_upcoming(store: FarmStore, now: datetime):
    table = Table(title="Upcoming Reminders")
    table.add_column("Event", style="cyan")
    table.add_column("Type")
    table.add_column("In", justify="right")
    for event in store.upcoming_events(now)[:3]:
        days = event.days_until(now)
        table.add_row(event.title, event_type_info(event.event_type).label, "Today" if days == 0 else f"{days}d")
    console.print(table)


def show_farmboard(store: FarmStore, now: datetime):
    # Reading the farmboard sweeps anything whose scheduled date has passed.
    items = store.farmboard(now)
    table = Table(title="Farmboard")
    table.add_column("Item", style="cyan")
    table.add_column("Type")
    table.add_column("Quantity", justify="right")
    table.add_column("Status")
    for item in items:
        table.add_row(item.name, item.item_type.value, item.formatted_quantity, item.status.value)
    console.print(table)


def show_low_stock(store: FarmStore):
    low = store.low_stock_items()
    if not low:
        console.print("[green]All storage items are above their minimum stock.[/green]")
        return
    table = Table(title="Low Stock")
    table.add_column("Item", style="red")
    table.add_column("Stock", justify="right")
    table.add_column("Minimum", justify="right")
    for item in low:
        table.add_row(item.name, f"{item.current_stock:g} {item.unit}", f"{item.minimum_stock:g} {item.unit}")
    console.print(table)


def log_change(change: StoreChange):
    console.print(f"[dim]store {change.action}: {', '.join(change.tables)}[/dim]")


if __name__ == "__main__":
    console.print("[bold blue]Farm Fields Log[/bold blue]")
    store = open_store()
    store.subscribe(log_change)
    now = datetime.now()

    scheduler = ConsoleNotificationScheduler()
    for event in store.upcoming_events(now):
        dispatch_event_reminder(scheduler, event, store.settings, now)

    show_productivity(store, now)
    show_tasks(store, now)
    show_upcoming(store, now)
    show_farmboard(store, now)
    show_low_stock(store)
