#!/usr/bin/env python3
"""ConcertFindr CLI.

Usage:
    concertfindr suggest <text>                        - City suggestions
    concertfindr search <city> --start D --end D       - Concerts near a city
    concertfindr genres [--set G ...] [--clear]        - Show or save genre filter
    concertfindr serve                                 - Run the JSON API
"""

import argparse
import json
import sys

from concertfindr import settings
from concertfindr.errors import ValidationError
from concertfindr.formatting import format_display_date, format_event_line
from concertfindr.preferences import GenrePreferenceStore


def _build_workflow():
    from concertfindr.mapbox_client import MapboxClient
    from concertfindr.ticketmaster_client import TicketmasterClient
    from concertfindr.workflow import SearchWorkflow

    return SearchWorkflow(MapboxClient(), TicketmasterClient())


def cmd_suggest(args):
    """Print city suggestions for partial input."""
    try:
        workflow = _build_workflow()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    result = workflow.fetcher.suggest(args.text, workflow.tokens.begin())
    workflow.close()

    if result.failed:
        print(f"Error: {result.error}")
        return 1
    if not result.suggestions:
        print("No suggestions.")
        return 0

    for i, s in enumerate(result.suggestions, 1):
        print(f"  {i}. {s.display_text}")
    return 0


def cmd_search(args):
    """Pick a city from the suggestions and search concerts there."""
    try:
        workflow = _build_workflow()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.genre:
        workflow.genres = frozenset(args.genre)

    try:
        suggestions = workflow.fetcher.suggest(args.city, workflow.tokens.begin())
        if suggestions.failed:
            print(f"Error: {suggestions.error}")
            return 1
        if len(suggestions.suggestions) < args.pick:
            print(f"No city found for '{args.city}'.")
            return 1

        selection = workflow.select_place(suggestions.suggestions[args.pick - 1])
        result = workflow.search(args.start, args.end, args.radius)
    except ValidationError as e:
        print(f"Error: {e.message}")
        return 1
    finally:
        workflow.close()

    if not result.ok:
        print(f"Error: {result.error}")
        return 1

    if args.json:
        print(json.dumps({"city": selection.display_name,
                          "events": [e.to_dict() for e in result.events]}, indent=2))
        return 0

    start = format_display_date(result.criteria.start_date.isoformat())
    end = format_display_date(result.criteria.end_date.isoformat())
    if result.is_empty:
        print(f"No concerts found for {selection.display_name} between {start} and {end}.")
        return 0

    print(f"Found {len(result.events)} concerts near {selection.display_name} ({start} - {end}):\n")
    for event in result.events:
        print(f"  {format_event_line(event)}")
        if event.detail_url:
            print(f"    {event.detail_url}")
    return 0


def cmd_genres(args):
    """Show or update the saved genre filter."""
    store = GenrePreferenceStore()

    if args.clear:
        store.save([])
    elif args.set:
        unknown = sorted(set(args.set) - set(settings.GENRE_IDS))
        if unknown:
            print(f"Error: unknown genres: {', '.join(unknown)}")
            print(f"Available: {', '.join(sorted(settings.GENRE_IDS))}")
            return 1
        store.save(args.set)

    saved = store.load()
    print(f"Saved genres: {', '.join(saved) if saved else 'all'}")
    return 0


def cmd_serve(args):
    """Run the JSON API."""
    from concertfindr.server import create_app

    try:
        app = create_app()
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    app.run(host=args.host, port=args.port)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="ConcertFindr - all you need is a city and a date!",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  concertfindr suggest Chicago
  concertfindr search Chicago --start 2025-06-01 --end 2025-06-07
  concertfindr search Austin --start 2025-06-01 --end 2025-06-01 --genre Rock --genre Blues
  concertfindr genres --set Jazz Blues

Setup:
  Set TICKETMASTER_API_KEY and MAPBOX_ACCESS_TOKEN, or put them in config/config.json
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Suggest command
    p_suggest = subparsers.add_parser("suggest", help="Show city suggestions")
    p_suggest.add_argument("text", help="Partial city name")
    p_suggest.set_defaults(func=cmd_suggest)

    # Search command
    p_search = subparsers.add_parser("search", help="Search concerts near a city")
    p_search.add_argument("city", help="City name (first suggestion is used)")
    p_search.add_argument("-s", "--start", required=True, help="Start date YYYY-MM-DD")
    p_search.add_argument("-e", "--end", required=True, help="End date YYYY-MM-DD (inclusive)")
    p_search.add_argument("-r", "--radius", type=int, default=settings.DEFAULT_RADIUS_MILES,
                          help=f"Radius in miles (default: {settings.DEFAULT_RADIUS_MILES})")
    p_search.add_argument("-g", "--genre", action="append", choices=sorted(settings.GENRE_IDS),
                          help="Genre filter for this search (repeatable; default: saved genres)")
    p_search.add_argument("-p", "--pick", type=int, default=1,
                          help="Which suggestion to use (default: 1)")
    p_search.add_argument("--json", action="store_true", help="Output events as JSON")
    p_search.set_defaults(func=cmd_search)

    # Genres command
    p_genres = subparsers.add_parser("genres", help="Show or save the genre filter")
    p_genres.add_argument("--set", nargs="+", metavar="GENRE", help="Genres to save")
    p_genres.add_argument("--clear", action="store_true", help="Search all genres")
    p_genres.set_defaults(func=cmd_genres)

    # Serve command
    p_serve = subparsers.add_parser("serve", help="Run the JSON API")
    p_serve.add_argument("--host", default="127.0.0.1", help="Host (default: 127.0.0.1)")
    p_serve.add_argument("-p", "--port", type=int, default=8000, help="Port (default: 8000)")
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
