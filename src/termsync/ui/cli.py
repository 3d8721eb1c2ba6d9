from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from termsync.adapters.rendering import FORMAT_CHOICES, OutputFormat
from termsync.app import (
    SynchronizationTarget,
    build_centraxx_target,
    build_directory_provider,
    build_ecl_provider,
    build_fhir_server_provider,
    build_file_target,
    build_package_provider,
    build_ql4mdr_target,
    run_pipeline,
)
from termsync.config import (
    DEFAULT_CATALOG_TYPE,
    DEFAULT_PACKAGE_REGISTRY_URL,
    DEFAULT_SNOMED_CT_EDITION,
    ConfigurationError,
    configure_logging,
    get_centraxx_config,
    get_ql4mdr_config,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from termsync.domain.ports import IngestProvider, MdrSynchronization

log = logging.getLogger(__name__)


def _output_options() -> argparse.ArgumentParser:
    output = argparse.ArgumentParser(add_help=False)
    output.add_argument(
        "--target",
        choices=[target.value for target in SynchronizationTarget],
        default=SynchronizationTarget.FILE.value,
        help="Where to synchronize the converted catalogs (default: %(default)s)",
    )
    output.add_argument(
        "--output",
        type=Path,
        help="Output directory for the file target",
    )
    output.add_argument(
        "--format",
        dest="output_format",
        type=str,
        help=f"Output format for the file target, one of: {', '.join(FORMAT_CHOICES)}",
    )
    output.add_argument(
        "--catalog-type",
        type=str,
        default=DEFAULT_CATALOG_TYPE,
        help="CentraXX catalog type (default: %(default)s)",
    )
    output.add_argument(
        "--cleanup",
        action="store_true",
        help="Remove temporary artifacts (downloaded packages) after the run",
    )
    output.add_argument(
        "--skip-endpoint-validation",
        action="store_true",
        help="Do not check the target is reachable before synchronizing",
    )
    output.add_argument(
        "--no-wrap-json",
        dest="wrap_json",
        action="store_false",
        help="Send QL4MDR queries as raw application/graphql instead of JSON",
    )
    output.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-request details",
    )
    return output


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    output = _output_options()
    parser = argparse.ArgumentParser(
        description="Convert FHIR terminology resources and synchronize them to an MDR",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    directory = subparsers.add_parser(
        "directory",
        parents=[output],
        help="Read CodeSystem, ValueSet and Bundle files from a directory",
    )
    directory.add_argument("path", type=Path, help="Directory with FHIR JSON or XML files")
    directory.add_argument(
        "--terminology-server",
        type=str,
        help="Terminology server used to expand unexpanded ValueSets",
    )

    server = subparsers.add_parser(
        "fhir-server",
        parents=[output],
        help="Read a collection Bundle from a FHIR terminology server",
    )
    server.add_argument("--endpoint", type=str, required=True, help="FHIR base URL")
    server.add_argument("--bundle-id", type=str, required=True, help="Id of the Bundle")

    package = subparsers.add_parser(
        "package",
        parents=[output],
        help="Download a FHIR package from a package registry",
    )
    package.add_argument("name", type=str, help="Package name")
    package.add_argument(
        "--package-version",
        type=str,
        help="Package version (defaults to the latest release)",
    )
    package.add_argument(
        "--registry-url",
        type=str,
        default=DEFAULT_PACKAGE_REGISTRY_URL,
        help="Package registry (default: %(default)s)",
    )
    package.add_argument(
        "--terminology-server",
        type=str,
        help="Terminology server used to expand unexpanded ValueSets",
    )

    ecl = subparsers.add_parser(
        "ecl",
        parents=[output],
        help="Expand a SNOMED CT expression constraint into a ValueSet",
    )
    ecl.add_argument("--ecl", type=str, required=True, help="Expression constraint")
    ecl.add_argument("--terminology-server", type=str, required=True, help="FHIR base URL")
    ecl.add_argument("--value-set-name", type=str, required=True)
    ecl.add_argument("--value-set-title", type=str, required=True)
    ecl.add_argument("--value-set-version", type=str, required=True)
    ecl.add_argument(
        "--snomed-ct-edition",
        type=str,
        default=DEFAULT_SNOMED_CT_EDITION,
        help="SNOMED CT edition module id (default: %(default)s)",
    )
    ecl.add_argument("--snomed-ct-version", type=str, help="SNOMED CT edition version")
    ecl.add_argument(
        "--value-set-output",
        type=Path,
        help="Directory to write the expanded ValueSet to",
    )

    return parser.parse_args(list(argv))


def _build_provider(args: argparse.Namespace) -> IngestProvider:
    if args.command == "directory":
        return build_directory_provider(args.path, terminology_server=args.terminology_server)
    if args.command == "fhir-server":
        return build_fhir_server_provider(args.endpoint, args.bundle_id)
    if args.command == "package":
        return build_package_provider(
            args.name,
            package_version=args.package_version,
            registry_url=args.registry_url,
            terminology_server=args.terminology_server,
        )
    if args.command == "ecl":
        return build_ecl_provider(
            ecl=args.ecl,
            terminology_server=args.terminology_server,
            value_set_name=args.value_set_name,
            value_set_title=args.value_set_title,
            value_set_version=args.value_set_version,
            snomed_ct_edition=args.snomed_ct_edition,
            snomed_ct_version=args.snomed_ct_version,
            output_directory=args.value_set_output,
        )
    raise ValueError(f"Unsupported command: {args.command}")


def _build_driver(args: argparse.Namespace) -> MdrSynchronization:
    target = SynchronizationTarget(args.target)
    if target is SynchronizationTarget.CENTRAXX:
        return build_centraxx_target(get_centraxx_config(catalog_type=args.catalog_type))
    if target is SynchronizationTarget.QL4MDR:
        return build_ql4mdr_target(get_ql4mdr_config(wrap_json=args.wrap_json))
    if args.output is None:
        raise ValueError("The file target needs --output")
    if args.output_format is None:
        raise ValueError("The file target needs --format")
    return build_file_target(
        args.output,
        OutputFormat.parse(args.output_format),
        catalog_type=args.catalog_type,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)
    try:
        driver = _build_driver(parsed_args)
        provider = _build_provider(parsed_args)
    except (ValueError, ConfigurationError, OSError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        summary = run_pipeline(
            provider,
            driver,
            cleanup=parsed_args.cleanup,
            validate_endpoint=not parsed_args.skip_endpoint_validation,
        )
    except Exception:
        log.exception("Fatal error during conversion")
        sys.exit(1)
    if summary is None:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
