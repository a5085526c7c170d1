from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from typing import Optional

from openproject_client import (
    FilterSpec,
    OpenProjectClientError,
    WorkPackage,
    create_client_from_env,
)
from openproject_client.logging import setup_logging


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(name)
    return val if val else default


def _print_step(title: str) -> None:
    print(f"\n== {title}")


def _fail(msg: str) -> int:
    print(f"FAILED: {msg}")
    return 1


def run_smoke_test() -> int:
    # --- Config ---
    cfg_project = _env("TEST_PROJECT_ID")
    cfg_type_id = _env("TEST_WP_TYPE_ID")
    cleanup = _env("SMOKE_TEST_CLEANUP", "0") == "1"

    print("Config:")
    print(f"  project: {cfg_project}")
    print(f"  type_id: {cfg_type_id}")
    print(f"  cleanup: {cleanup}")

    try:
        client = create_client_from_env()
    except OpenProjectClientError as exc:
        return _fail(str(exc))

    with client:
        # --- List projects ---
        _print_step("List projects")
        projects, resp = client.projects.list(FilterSpec(page_size=50))
        if not projects:
            return _fail("No projects available.")
        print(f"Got {resp.count} of {resp.total} projects")

        selected = None
        if cfg_project:
            selected = next(
                (
                    p
                    for p in projects
                    if str(p.id) == cfg_project or p.identifier == cfg_project
                ),
                None,
            )
        selected = selected or projects[0]
        print(f"Selected project: {selected.name} (id={selected.id})")

        # --- List statuses ---
        _print_step("List statuses")
        statuses, _ = client.statuses.list()
        print(", ".join(s.name or "?" for s in statuses))

        # --- Create work package ---
        _print_step("Create work package")
        subject = (
            f"Smoke Test {datetime.now(timezone.utc).isoformat(timespec='seconds')}"
        )
        wp = WorkPackage(subject=subject)
        if cfg_type_id:
            wp.links["type"] = {"href": f"/api/v3/types/{cfg_type_id}"}
        try:
            created, _ = client.work_packages.create(wp, selected.id)
        except OpenProjectClientError as exc:
            return _fail(f"Create failed: {exc}")
        if created.id is None:
            return _fail("Create did not return an id.")
        print(f"Created WP id={created.id}, subject='{subject}'")

        # --- Verify ---
        _print_step("Verify")
        fetched, _ = client.work_packages.get(created.id)
        if fetched.subject != subject:
            return _fail(
                f"Verification failed: expected subject '{subject}', "
                f"got '{fetched.subject}'"
            )
        print(f"Verification OK (status: {fetched.status_title})")

        # --- Cleanup (optional) ---
        _print_step("Cleanup")
        if cleanup:
            client.work_packages.delete(created.id)
            print(f"Deleted WP id={created.id}")
        else:
            print(
                "Cleanup skipped (SMOKE_TEST_CLEANUP=0). Work package left in system."
            )

    print("\nPASSED smoke test.")
    return 0


def main() -> None:
    setup_logging(_env("LOG_LEVEL", "INFO"))
    sys.exit(run_smoke_test())


if __name__ == "__main__":
    main()
