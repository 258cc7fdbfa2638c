from rich.panel import Panel
from rich.markup import escape
from rich.table import Table
from rich.prompt import Prompt
from rich.console import Console
import argparse
import sys
import signal
from datetime import datetime
from typing import Optional
from mailquery.search.models import SearchQuery
from mailquery.search.search_executor import SearchExecutor, load_mailbox
from mailquery.search.voice_search import VoiceSearchService
from mailquery.utils.config import SearchSettings, get_settings
from mailquery.utils.logging import logger, set_verbose

HELP_TEXT = """[bold]Commands[/bold]
  /help, /?        Show this help
  /limit <n>       Number of matching emails to display (max 50)
  /now <iso date>  Resolve dates against a fixed reference time
  /now             Go back to the current time
  /quit, /q        Exit

Anything else is treated as a search, e.g. [cyan]emails from sarah about the budget last week[/cyan]"""

class SearchInterface:
    def __init__(self, executor: SearchExecutor, settings: Optional[SearchSettings] = None, verbose: bool = False):
        self.verbose = verbose
        self.display_limit = 20
        self.is_running = True
        self.now: Optional[datetime] = None
        self.console = Console()
        self.service = VoiceSearchService(executor, settings=settings, verbose=verbose)

    def execute_search(self, query: str) -> None:
        """Parse a query, run it and print the outcome"""
        try:
            with self.console.status("[bold green]Searching emails...", spinner="dots"):
                response = self.service.search(query, self.now)

            self.console.print(Panel(escape(response['response']), title="Search"))

            if self.verbose:
                parsed = SearchQuery.model_validate(response['parsed_parameters'])
                self.console.print(self.format_query_table(parsed))

            if response['results']:
                self.console.print(self.format_results_table(response['results'][:self.display_limit]))
                if len(response['results']) > self.display_limit:
                    self.console.print(f"Showing {self.display_limit} of {len(response['results'])} results")

        except Exception as e:
            self.console.print(f"[red]Error:[/red] {escape(str(e))}")

    def format_query_table(self, query: SearchQuery) -> Table:
        table = Table(title="Parsed Query", show_header=False)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value")
        for name, value in query.model_dump(mode="json").items():
            if value is not None:
                table.add_row(name, str(value))
        return table

    def format_results_table(self, results: list) -> Table:
        """Format search results into a rich table"""
        table = Table(title="Search Results", show_header=True, header_style="bold magenta")
        table.add_column("Date", style="cyan", no_wrap=True)
        table.add_column("From", style="green")
        table.add_column("Subject", style="blue")

        for result in results:
            sender = result['sender']
            if result.get('sender_name'):
                sender = f"{result['sender_name']} ({sender})"
            table.add_row(result['date'][:10], sender, result['subject'])

        return table

    def print_help(self) -> None:
        self.console.print(Panel(HELP_TEXT, title="Help"))

    def handle_command(self, command: str) -> None:
        name, _, argument = command.partition(' ')
        name = name.lower()
        argument = argument.strip()

        if name in ['/quit', '/q']:
            self.console.print("[green]Goodbye![/green]")
            self.is_running = False
        elif name in ['/help', '/?']:
            self.print_help()
        elif name == '/limit':
            try:
                self.display_limit = max(1, min(int(argument), 50))
                self.console.print(f"[green]Display limit set to {self.display_limit}[/green]")
            except ValueError:
                self.console.print("[red]Invalid limit value[/red]")
        elif name == '/now':
            if not argument:
                self.now = None
                self.console.print("[green]Using the current time[/green]")
                return
            try:
                self.now = datetime.fromisoformat(argument)
                self.console.print(f"[green]Reference time set to {self.now.isoformat()}[/green]")
            except ValueError:
                self.console.print("[red]Invalid date, use ISO format like 2024-06-12T09:00[/red]")
        else:
            self.console.print(f"[red]Unknown command:[/red] {name}")

    def run(self) -> None:
        """Run the interactive interface"""
        self.console.print("[bold blue]Email Search Interface[/bold blue]")
        self.console.print("Type your query or /? for help\n")

        while self.is_running:
            try:
                query = Prompt.ask(">>> ")
                query = query.strip()

                if not query:
                    continue

                if query.startswith('/'):
                    self.handle_command(query)
                else:
                    self.execute_search(query)

            except KeyboardInterrupt:
                self.console.print("\n[green]Goodbye![/green]")
                break
            except EOFError:  # Handle Ctrl+D
                self.console.print("\n[green]Goodbye![/green]")
                break

def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description='Interactive email search interface')
    parser.add_argument('--mailbox', default=settings.mailbox_path, help='JSON file of messages to search')
    parser.add_argument('-v', '--verbose', action='store_true', default=settings.verbose, help='Enable verbose output')
    args = parser.parse_args()

    def handle_interrupt(signum, frame):
        print("\nGoodbye!")
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_interrupt)
    set_verbose(args.verbose)

    try:
        messages = load_mailbox(args.mailbox) if args.mailbox else []
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    interface = SearchInterface(SearchExecutor(messages, verbose=args.verbose), settings=settings, verbose=args.verbose)
    interface.run()

if __name__ == '__main__':
    main()
