"""Command-line entry point: ``es-migrate <namespace>/<name> --from <ctx> --to <ctx>``."""

import argparse
import asyncio
import sys

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from .constants import SOURCE_ROLE, TARGET_ROLE
from .core.exceptions import MigrationError, ValidationError
from .core.kube_client import connect_endpoint
from .core.logging_config import get_logger, setup_logging
from .core.settings import MigrationSettings
from .models import MigrationRequest, MigrationState
from .services.migration import MigrationContext, MigrationOrchestrator

EXIT_OK = 0
EXIT_FAILURE = 1


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser exiting with status 1, like every other failure."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="es-migrate",
        description="Move an Elasticsearch cluster between two K8s clusters in the same region",
    )
    parser.add_argument("target", metavar="namespace/name", help="Elasticsearch resource to migrate")
    parser.add_argument("--from", dest="source_context", default="", help="Kubectl config context name")
    parser.add_argument("--to", dest="target_context", default="", help="Kubectl config context name")
    parser.add_argument("--kubeconfig", default=None, help="Kubeconfig file path")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument("--log-dir", default=None, help="Also write JSON logs to this directory")
    parser.add_argument(
        "--poll-interval", type=float, default=None, help="Seconds between target cluster checks"
    )
    parser.add_argument(
        "--poll-attempts", type=int, default=None, help="Number of target cluster checks"
    )
    return parser


def parse_request(args: argparse.Namespace) -> MigrationRequest:
    """Validate the positional argument and context flags.

    Raises:
        ValidationError: An argument is malformed or a mandatory flag is missing
    """
    if not args.source_context:
        raise ValidationError("--from=<kubeconfig context name> is mandatory")
    if not args.target_context:
        raise ValidationError("--to=<kubeconfig context name> is mandatory")
    try:
        return MigrationRequest.from_target(args.target, args.source_context, args.target_context)
    except (ValueError, PydanticValidationError) as e:
        raise ValidationError(f"invalid argument {args.target}. Expected 'namespace/name'") from e


def load_settings(args: argparse.Namespace) -> MigrationSettings:
    """Environment settings with command-line overrides applied."""
    overrides = {
        "kubeconfig": args.kubeconfig,
        "log_level": args.log_level,
        "log_dir": args.log_dir,
        "poll_interval_seconds": args.poll_interval,
        "poll_max_attempts": args.poll_attempts,
    }
    return MigrationSettings(**{key: value for key, value in overrides.items() if value is not None})


async def run(request: MigrationRequest, settings: MigrationSettings) -> MigrationState:
    """Connect to both clusters and run the migration."""
    source = await connect_endpoint(request.source_context, SOURCE_ROLE, settings)
    target = await connect_endpoint(request.target_context, TARGET_ROLE, settings)
    context = MigrationContext(
        source=source,
        target=target,
        namespace=request.namespace,
        name=request.name,
        poll_policy=settings.poll_policy(),
    )
    return await MigrationOrchestrator().migrate(context)


def main(argv: list[str] | None = None) -> int:
    """Main entry point; returns the process exit code."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        request = parse_request(args)
        settings = load_settings(args)
    except ValidationError as e:
        print(str(e), file=sys.stderr)
        return EXIT_FAILURE
    except PydanticValidationError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE

    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        max_file_size_mb=settings.log_file_size_mb,
    )
    logger = get_logger("cli")

    try:
        asyncio.run(run(request, settings))
    except MigrationError as e:
        logger.error("failed to run the migration", error=str(e), error_type=type(e).__name__)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.error("Migration interrupted")
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
