"""Arena CLI entry point."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from arena import __version__
from arena.config import get_settings
from arena.container import open_container
from arena.database import create_engine_from_settings, init_models
from arena.errors import ArenaError
from arena.scheduler import start_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from arena.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== Arena Configuration ===\n")
        print(f"Environment: {settings.environment}")
        print(f"Database: {settings.database_url}")
        print(f"Data Directory: {settings.data_dir}\n")

        print("Ledger:")
        print(f"  Min Bet: {settings.ledger.min_bet_amount} points")
        print(f"  Max Bet: {settings.ledger.max_bet_fraction:.0%} of balance")
        print(f"  Betting Lockout: {settings.ledger.betting_lockout_minutes} min before kickoff")
        print(f"  Initial Balance: {settings.ledger.initial_balance:,} points\n")

        print("Odds:")
        print(
            f"  Seeds (home/draw/away): {settings.odds.seed_home} / "
            f"{settings.odds.seed_draw} / {settings.odds.seed_away}"
        )
        print(f"  Payout Factor: {settings.odds.payout_factor}\n")

        print("Settlement:")
        print(
            f"  Schedule: {settings.settlement.cron_day_of_week} "
            f"{settings.settlement.cron_hour:02d}:{settings.settlement.cron_minute:02d} UTC"
        )
        print(f"  Fetch Delay: {settings.settlement.fetch_delay_seconds}s")
        print(f"  Close Pass: every {settings.settlement.close_interval_minutes} min\n")

        print("API Keys:")
        print(f"  football-data.org: {'✓ Set' if settings.football_data_api_token else '✗ Not set'}")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return 1


async def _init_db() -> None:
    engine = create_engine_from_settings(get_settings())
    try:
        await init_models(engine)
    finally:
        await engine.dispose()


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create database tables."""
    try:
        asyncio.run(_init_db())
        print("\n✓ Database tables created\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        print(f"\n❌ Database initialization failed: {e}\n")
        return 1


async def _add_agent(agent_id: str, name: str, secret_key: str | None):
    async with open_container(get_settings()) as container:
        return await container.ledger.register_agent(agent_id, name, secret_key)


def cmd_add_agent(args: argparse.Namespace) -> int:
    """Register a betting agent."""
    try:
        agent = asyncio.run(_add_agent(args.agent_id, args.name, args.secret_key))
        print(f"\n✓ Registered agent {agent.agent_id} ({agent.name})")
        print(f"Balance: {agent.balance} points")
        if not args.secret_key:
            print(f"Secret Key: {agent.secret_key}")
        print()
        return 0
    except ArenaError as e:
        print(f"\n❌ {e}\n")
        return 1


async def _add_match(api_id: int, home: str, away: str, kickoff: datetime):
    async with open_container(get_settings()) as container:
        return await container.matches.import_match(api_id, home, away, kickoff)


def cmd_add_match(args: argparse.Namespace) -> int:
    """Import a fixture as UPCOMING."""
    try:
        kickoff = datetime.fromisoformat(args.kickoff)
    except ValueError:
        print(f"\n❌ Invalid kickoff time: {args.kickoff}\n")
        return 1

    try:
        match = asyncio.run(_add_match(args.api_id, args.home, args.away, kickoff))
        print(f"\n✓ Match {match.id}: {match.home_team} vs {match.away_team} ({match.status.value})\n")
        return 0
    except ArenaError as e:
        print(f"\n❌ {e}\n")
        return 1


async def _open_matches() -> int:
    async with open_container(get_settings()) as container:
        return await container.matches.open_matches_for_current_week()


def cmd_open_matches(args: argparse.Namespace) -> int:
    """Open betting on this week's fixtures."""
    try:
        count = asyncio.run(_open_matches())
        print(f"\n✓ {count} matches opened for betting\n")
        return 0
    except Exception as e:
        logger.error(f"Opening matches failed: {e}", exc_info=True)
        print(f"\n❌ Opening matches failed: {e}\n")
        return 1


async def _close_matches() -> int:
    async with open_container(get_settings()) as container:
        return await container.matches.close_expired_matches()


def cmd_close_matches(args: argparse.Namespace) -> int:
    """Close betting on matches past their deadline."""
    try:
        count = asyncio.run(_close_matches())
        print(f"\n✓ {count} matches closed\n")
        return 0
    except Exception as e:
        logger.error(f"Closing matches failed: {e}", exc_info=True)
        print(f"\n❌ Closing matches failed: {e}\n")
        return 1


async def _settle():
    async with open_container(get_settings()) as container:
        return await container.settlement.run_weekly_settlement()


def cmd_settle(args: argparse.Namespace) -> int:
    """Run one settlement pass over last week."""
    _init_logfire()

    settings = get_settings()
    if settings.is_production and not args.force:
        print("\n❌ Refusing to settle manually in production (use --force)\n")
        return 1

    try:
        print("\n=== Weekly Settlement ===\n")

        report = asyncio.run(_settle())

        print(f"Window: {report.window_start:%Y-%m-%d} - {report.window_end:%Y-%m-%d}")
        print(f"Matches found: {report.matches_found}")
        print(f"Matches settled: {report.matches_settled}")
        print(f"Deferred: {report.matches_deferred}")
        print(f"Predictions resolved: {report.predictions_resolved}")
        print(f"Agents updated: {report.agents_updated}")
        if report.failed_match_ids:
            print(f"Failed: {', '.join(str(i) for i in report.failed_match_ids)}")
        print()

        return 0 if not report.failed_match_ids else 1

    except Exception as e:
        logger.error(f"Settlement failed: {e}", exc_info=True)
        print(f"\n❌ Settlement failed: {e}\n")
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """Start the scheduler."""
    try:
        _init_logfire()

        if args.debug:
            logging.getLogger().setLevel(logging.DEBUG)

        settings = get_settings()

        print("\n=== Arena Ledger Scheduler ===\n")
        print(f"Version: {__version__}")
        print(f"Environment: {settings.environment}\n")

        start_scheduler(settings)

        return 0

    except KeyboardInterrupt:
        print("\n\nReceived interrupt signal. Shutting down...\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to start scheduler: {e}", exc_info=True)
        print(f"\nFailed to start: {e}\n")
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the HTTP API."""
    import uvicorn

    from arena.api import create_app

    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Arena: pari-mutuel wagering ledger for football prediction agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Arena {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_config = subparsers.add_parser("config", help="Display merged configuration")
    parser_config.set_defaults(func=cmd_config)

    parser_init_db = subparsers.add_parser("init-db", help="Create database tables")
    parser_init_db.set_defaults(func=cmd_init_db)

    parser_agent = subparsers.add_parser("add-agent", help="Register a betting agent")
    parser_agent.add_argument("--agent-id", required=True, help="Public agent identifier")
    parser_agent.add_argument("--name", required=True, help="Display name")
    parser_agent.add_argument(
        "--secret-key",
        help="Secret key (generated when omitted)",
    )
    parser_agent.set_defaults(func=cmd_add_agent)

    parser_match = subparsers.add_parser("add-match", help="Import a fixture as UPCOMING")
    parser_match.add_argument("--api-id", type=int, required=True, help="football-data.org match id")
    parser_match.add_argument("--home", required=True, help="Home team")
    parser_match.add_argument("--away", required=True, help="Away team")
    parser_match.add_argument(
        "--kickoff",
        required=True,
        help="Kickoff time, ISO 8601 (UTC assumed when no offset is given)",
    )
    parser_match.set_defaults(func=cmd_add_match)

    parser_open = subparsers.add_parser(
        "open-matches",
        help="Open betting on this week's UPCOMING matches",
    )
    parser_open.set_defaults(func=cmd_open_matches)

    parser_close = subparsers.add_parser(
        "close-matches",
        help="Close betting on matches past their deadline",
    )
    parser_close.set_defaults(func=cmd_close_matches)

    parser_settle = subparsers.add_parser(
        "settle",
        help="Settle last week's matches now",
    )
    parser_settle.add_argument(
        "--force",
        action="store_true",
        help="Allow a manual run in production",
    )
    parser_settle.set_defaults(func=cmd_settle)

    parser_run = subparsers.add_parser("run", help="Start the job scheduler")
    parser_run.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser_run.set_defaults(func=cmd_run)

    parser_serve = subparsers.add_parser("serve", help="Serve the HTTP API")
    parser_serve.add_argument("--host", help="Bind address")
    parser_serve.add_argument("--port", type=int, help="Bind port")
    parser_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
