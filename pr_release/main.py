"""git-pr-release entry point.

Creates or updates the pull request from the staging branch into the
production branch, listing every feature pull request merged into
staging since the last release. Usage: git-pr-release [--dry-run] [--json].
"""

import argparse
import json
import sys

from pr_release.config import LoggingConfig
from pr_release.logging import ReleaseLogging
from pr_release.release import ExitCode, PersistenceError, resolve_context, run_release
from pr_release.services.merge_set import NothingToReleaseError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="git-pr-release",
        description="Create or update the release pull request (staging -> production)",
    )
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="Render the title and body and print them; change nothing",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also print release PR, merged PRs and changed files as JSON",
    )
    parser.add_argument(
        "--no-fetch",
        action="store_true",
        help="Do not run 'git remote update origin' first",
    )
    parser.add_argument(
        "--squashed",
        action="store_true",
        help="Also find squash-merged pull requests through the search API",
    )
    parser.add_argument(
        "--overwrite-description",
        action="store_true",
        help="Replace the body instead of merging it into the existing one",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for git-pr-release."""
    args = parse_args(argv)
    release_logging = ReleaseLogging(LoggingConfig(), verbose=args.verbose)
    release_logging.setup()
    log = release_logging.get_logger("pr_release.main")

    try:
        ctx, adapter = resolve_context(
            log=log,
            dry_run=args.dry_run,
            json_output=args.json,
            fetch=not args.no_fetch,
            squashed=args.squashed,
            overwrite_description=args.overwrite_description,
        )
        result = run_release(ctx, adapter, log=log)
    except NothingToReleaseError as e:
        log.error("%s", e)
        return ExitCode.NOTHING_TO_RELEASE
    except PersistenceError as e:
        log.error("%s", e)
        return e.exit_code
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return ExitCode.FATAL

    if ctx.json_output:
        print(json.dumps(result.to_payload(), indent=2))
    return ExitCode.OK


if __name__ == "__main__":
    sys.exit(main())
