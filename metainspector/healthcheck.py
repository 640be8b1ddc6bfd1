#!/usr/bin/env python3
"""
Health check module for MetaInspector.

Backs the /health endpoint and the `metainspector health` command.
"""

import sys
from typing import Dict, Any, List
from dataclasses import dataclass, asdict

from .config import LOG_DIR, TEMPLATES_DIR, load_config, validate_config

REQUIRED_TEMPLATES = ("base.html", "dashboard.html")


@dataclass
class HealthCheckResult:
    """Result of a health check."""
    name: str
    healthy: bool
    message: str
    details: Dict[str, Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


def check_templates() -> HealthCheckResult:
    """Check dashboard templates are installed."""
    missing = [name for name in REQUIRED_TEMPLATES if not (TEMPLATES_DIR / name).is_file()]
    if missing:
        return HealthCheckResult(
            name="templates",
            healthy=False,
            message=f"Missing templates: {', '.join(missing)}",
            details={"templates_dir": str(TEMPLATES_DIR)},
        )
    return HealthCheckResult(
        name="templates",
        healthy=True,
        message=f"{len(REQUIRED_TEMPLATES)} templates found",
    )


def check_log_directory() -> HealthCheckResult:
    """Check the log directory exists and is writable."""
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        test_file = LOG_DIR / ".write_test"
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        return HealthCheckResult(
            name="log_directory",
            healthy=False,
            message=f"Log directory not writable: {e}",
        )
    return HealthCheckResult(
        name="log_directory",
        healthy=True,
        message=f"{LOG_DIR} is writable",
    )


def check_config() -> HealthCheckResult:
    """Check configuration validity."""
    try:
        config = load_config()
        errors = validate_config(config)
    except (ValueError, OSError) as e:
        return HealthCheckResult(
            name="config",
            healthy=False,
            message=f"Config load error: {e}",
        )

    if errors:
        return HealthCheckResult(
            name="config",
            healthy=False,
            message=f"Config errors: {len(errors)} issues",
            details={"errors": errors},
        )
    return HealthCheckResult(
        name="config",
        healthy=True,
        message="Configuration valid",
        details={"timeout_seconds": config.fetch.timeout_seconds, "max_retries": config.retry.max_retries},
    )


def run_all_checks() -> tuple[bool, List[HealthCheckResult]]:
    """
    Run all health checks.

    Returns:
        tuple[bool, List[HealthCheckResult]]: (all_healthy, results)
    """
    checks = [
        check_templates,
        check_log_directory,
        check_config,
    ]

    results = []
    for check_fn in checks:
        try:
            results.append(check_fn())
        except Exception as e:
            results.append(HealthCheckResult(
                name=check_fn.__name__.replace("check_", ""),
                healthy=False,
                message=f"Check failed: {e}",
            ))

    all_healthy = all(r.healthy for r in results)
    return all_healthy, results


def main() -> int:
    """CLI entry point for health checks."""
    all_healthy, results = run_all_checks()

    for result in results:
        status = "OK" if result.healthy else "FAIL"
        print(f"[{status}] {result.name}: {result.message}")

    print(f"\nOverall: {'Healthy' if all_healthy else 'Unhealthy'}")
    return 0 if all_healthy else 1


if __name__ == "__main__":
    sys.exit(main())
