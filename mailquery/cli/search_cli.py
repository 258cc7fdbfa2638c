#!/usr/bin/env python3
import argparse
from datetime import datetime
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from mailquery.search.models import SearchQuery
from mailquery.search.query_assembler import QueryAssembler
from mailquery.search.search_executor import SearchExecutor, load_mailbox
from mailquery.search.voice_search import VoiceSearchService
from mailquery.utils.config import get_settings
from mailquery.utils.logging import set_verbose

def create_query_table(query: SearchQuery) -> Table:
    """Show each field of a parsed query"""
    table = Table(title="Parsed Query", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for name, value in query.model_dump(mode="json").items():
        table.add_row(name, "-" if value is None else str(value))

    return table

def create_results_table(results: list) -> Table:
    table = Table(title="Matching Emails")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("From", style="green")
    table.add_column("Subject", style="blue")
    table.add_column("Folder")

    for result in results:
        sender = result['sender']
        if result.get('sender_name'):
            sender = f"{result['sender_name']} <{sender}>"
        table.add_row(
            result['date'][:10],
            sender,
            result['subject'],
            result['folder']
        )

    return table

def parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid ISO date: {value}")

def main(argv=None):
    settings = get_settings()

    parser = argparse.ArgumentParser(description='Turn a natural language email search into a structured query')
    parser.add_argument('query', help='Natural language search query')
    parser.add_argument('--now', type=parse_now, default=None, help='Reference time as ISO date (default: current time)')
    parser.add_argument('--mailbox', default=settings.mailbox_path, help='JSON file of messages to search')
    parser.add_argument('-v', '--verbose', action='store_true', default=settings.verbose, help='Enable verbose output')
    args = parser.parse_args(argv)

    console = Console()
    set_verbose(args.verbose)
    now = args.now or datetime.now()

    try:
        if not args.mailbox:
            parsed = QueryAssembler(settings, verbose=args.verbose).parse(args.query, now)
            console.print(create_query_table(parsed.query))
            console.print(Panel(escape(parsed.search_description), title="Search"))
            return 0

        service = VoiceSearchService(
            SearchExecutor(load_mailbox(args.mailbox), verbose=args.verbose),
            settings=settings,
            verbose=args.verbose
        )
        with console.status("[bold green]Searching emails..."):
            response = service.search(args.query, now)

        console.print(create_query_table(SearchQuery.model_validate(response['parsed_parameters'])))
        console.print(Panel(escape(response['response']), title="Search"))

        if response['results']:
            console.print(create_results_table(response['results']))
        else:
            console.print("[yellow]No results found[/yellow]")
        return 0

    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

if __name__ == "__main__":
    raise SystemExit(main())
