"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service
or runs one reconciliation or export command from the shell.
"""

import argparse
import json
import logging
from pathlib import Path

import uvicorn

from portal.bootstrap import PortalServices, bootstrap_create_application, bootstrap_create_services
from portal.domain import PortalError
from portal.namespaces import ExportReport, exporter_build_archive_file_name, exporter_stream_archive

logger = logging.getLogger(__name__)


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Namespace portal runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "missing-namespaces", "create-missing-namespaces", "export-all"),
        help="Runtime command: `api` starts server, `missing-namespaces` prints the missing set, "
        "`create-missing-namespaces` provisions it, `export-all` writes an export archive",
        type=str,
    )
    argument_parser.add_argument("--app-id", dest="app_id", type=str, help="Application identifier")
    argument_parser.add_argument(
        "--env",
        dest="envs",
        action="append",
        default=[],
        type=str,
        help="Environment identifier; repeatable for `create-missing-namespaces`",
    )
    argument_parser.add_argument(
        "--cluster",
        dest="cluster_name",
        default="default",
        type=str,
        help="Cluster name for reconciliation commands",
    )
    argument_parser.add_argument(
        "--output",
        dest="output",
        type=str,
        help="Archive path or directory for `export-all`",
    )
    argument_parser.add_argument(
        "--principal",
        dest="principal",
        default="",
        type=str,
        help="Principal used for visibility decisions in `export-all`",
    )
    parsed_arguments = argument_parser.parse_args()

    services = bootstrap_create_services()
    logging.basicConfig(
        level=services.settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if parsed_arguments.command == "api":
        application = bootstrap_create_application(services=services)
        uvicorn.run(
            application,
            host=services.settings.application_host,
            port=services.settings.application_port,
        )
        return

    try:
        if parsed_arguments.command == "missing-namespaces":
            exit_code = main_print_missing_namespaces(services, parsed_arguments)
        elif parsed_arguments.command == "create-missing-namespaces":
            exit_code = main_create_missing_namespaces(services, parsed_arguments)
        else:
            exit_code = main_export_all(services, parsed_arguments)
    except PortalError as error:
        logger.error("%s failed: error_code=%s error=%s", parsed_arguments.command, error.error_code, error)
        exit_code = 1
    finally:
        services.environment_registry.registry_close()

    if exit_code != 0:
        raise SystemExit(exit_code)


def main_print_missing_namespaces(services: PortalServices, parsed_arguments: argparse.Namespace) -> int:
    """Print the missing set of each requested environment.

    Returns:
        int: Process exit code.

    Raises:
        PortalError: Raised when a reconciliation fails.
    """

    for env in main_requested_envs(services, parsed_arguments):
        missing_names = services.namespace_reconciler.reconciler_compute_missing(
            app_id=parsed_arguments.app_id or "",
            env=env,
            cluster_name=parsed_arguments.cluster_name,
        )
        print(json.dumps({"env": env, "missing": sorted(missing_names)}))
    return 0


def main_create_missing_namespaces(services: PortalServices, parsed_arguments: argparse.Namespace) -> int:
    """Provision missing namespaces in each requested environment.

    A failing environment does not stop the remaining ones; the exit code is
    non-zero when any environment or namespace failed.

    Returns:
        int: Process exit code.

    Raises:
        RuntimeError: Per-environment failures are reported, not raised.
    """

    exit_code = 0
    for env in main_requested_envs(services, parsed_arguments):
        try:
            result = services.namespace_provisioner.provisioner_create_missing(
                app_id=parsed_arguments.app_id or "",
                env=env,
                cluster_name=parsed_arguments.cluster_name,
            )
        except PortalError as error:
            print(json.dumps({"env": env, "error": {"code": error.error_code, "message": str(error)}}))
            exit_code = 1
            continue

        print(
            json.dumps(
                {
                    "env": result.env,
                    "created": list(result.created),
                    "failures": [
                        {"namespace_name": failure.namespace_name, "code": failure.error_code}
                        for failure in result.failures
                    ],
                }
            )
        )
        if not result.provisioning_is_complete():
            exit_code = 1
    return exit_code


def main_export_all(services: PortalServices, parsed_arguments: argparse.Namespace) -> int:
    """Write a bulk export archive to disk.

    Returns:
        int: Process exit code; non-zero when any unit was skipped.

    Raises:
        PortalError: Raised when the export inputs are invalid.
    """

    plan = services.namespace_exporter.exporter_prepare_export(main_requested_envs(services, parsed_arguments))
    output_path = Path(parsed_arguments.output or ".")
    if output_path.is_dir():
        output_path = output_path / exporter_build_archive_file_name()

    report = ExportReport()
    entries = services.namespace_exporter.exporter_iter_entries(
        plan=plan,
        principal=parsed_arguments.principal,
        report=report,
    )
    with output_path.open("wb") as archive_file:
        for chunk in exporter_stream_archive(entries):
            archive_file.write(chunk)

    print(
        json.dumps(
            {
                "archive": str(output_path),
                "exported": len(report.exported),
                "failures": [
                    {
                        "env": failure.env,
                        "app_id": failure.app_id,
                        "cluster_name": failure.cluster_name,
                        "namespace_name": failure.namespace_name,
                        "code": failure.error_code,
                    }
                    for failure in report.failures
                ],
            }
        )
    )
    return 1 if report.failures else 0


def main_requested_envs(services: PortalServices, parsed_arguments: argparse.Namespace) -> list[str]:
    """Return requested environments, defaulting to every configured one."""

    requested_envs = [env for raw_env in parsed_arguments.envs for env in raw_env.split(",") if env.strip()]
    return requested_envs or list(services.environment_registry.registry_environment_names())


if __name__ == "__main__":
    main()
