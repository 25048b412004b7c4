#!/usr/bin/env python3
"""API client smoke test for the public form endpoints.

Acts as a pure HTTP client against a running server: fetches a published
form, generates random valid answers for every collecting field (including
"Other" text, yes/no reasons and small attachments), submits them N times
and prints a summary.  ``--invalid`` additionally submits an empty payload
and expects a 422 listing every required field.

Usage::

    # Install deps (first time only)
    uv pip install httpx rich

    # One submission to a form by slug
    uv run python scripts/fill_form.py customer-feedback-a1b2c3

    # 10 submissions, verbose, reproducible
    uv run python scripts/fill_form.py <form-id> -n 10 -v --seed 42

    # Also check that an empty submission is rejected
    uv run python scripts/fill_form.py <form-ref> --invalid
"""

from __future__ import annotations

import argparse
import asyncio
import json
import random
import sys
from dataclasses import dataclass, field
from typing import Any

import httpx
from rich.console import Console
from rich.table import Table

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FREE_TEXT_POOL = [
    "Great service",
    "Could be faster",
    "Found you through a friend",
    "No comment",
    "Loved the onboarding call",
]

REASON_POOL = [
    "It worked well for our team",
    "Pricing was unclear",
    "Support answered quickly",
]

OTHER_VALUE = "__other__"
COLLECTING_CONTROLS = {"input", "textarea", "multi_input", "select", "radio", "checkbox"}


# ---------------------------------------------------------------------------
# Result tracking
# ---------------------------------------------------------------------------

@dataclass
class SubmitResult:
    run_index: int
    status_code: int = 0
    response_id: str | None = None
    errors: dict[str, str] = field(default_factory=dict)
    attachments: int = 0

    @property
    def ok(self) -> bool:
        return self.status_code == 201


# ---------------------------------------------------------------------------
# AnswerGenerator — random valid answers from rendered controls
# ---------------------------------------------------------------------------

class AnswerGenerator:
    """Builds a payload from the controls of a rendered public form."""

    def __init__(self, rng: random.Random):
        self._rng = rng

    def scalar(self, control: dict) -> str:
        input_type = control.get("input_type", "text")
        if input_type == "email":
            return f"user{self._rng.randint(1, 9999)}@example.com"
        if input_type == "number":
            return str(self._rng.randint(1, 100))
        if input_type == "date":
            return f"2026-{self._rng.randint(1, 12):02d}-{self._rng.randint(1, 28):02d}"
        return self._rng.choice(FREE_TEXT_POOL)

    def build(self, controls: list[dict]) -> tuple[dict[str, Any], dict[str, str], list[str]]:
        """Return (answers, reasons, field ids that accept files)."""
        answers: dict[str, Any] = {}
        reasons: dict[str, str] = {}
        with_files: list[str] = []

        for control in controls:
            kind = control["control"]
            if kind not in COLLECTING_CONTROLS:
                continue
            field_id = control["field_id"]

            if kind == "multi_input":
                answers[field_id] = [self.scalar(control) for _ in range(self._rng.randint(1, 3))]
            elif kind == "checkbox":
                options = [o["value"] for o in control["options"]]
                k = self._rng.randint(1, len(options)) if options else 0
                answers[field_id] = self._rng.sample(options, k)
            elif kind in ("radio", "select"):
                options = [o["value"] for o in control["options"]]
                if not options:
                    continue
                choice = self._rng.choice(options)
                if choice == OTHER_VALUE:
                    choice = self._rng.choice(FREE_TEXT_POOL)
                answers[field_id] = choice
                # Reason-requiring select: always justify yes/no answers
                if kind == "select" and "set_reason" in control.get("events", []):
                    if choice.strip().lower() in ("yes", "no"):
                        reasons[field_id] = self._rng.choice(REASON_POOL)
            else:
                answers[field_id] = self.scalar(control)

            if control.get("attachment_zone") is not None and self._rng.random() < 0.5:
                with_files.append(field_id)

        return answers, reasons, with_files


# ---------------------------------------------------------------------------
# APIClient — thin httpx wrapper
# ---------------------------------------------------------------------------

class APIClient:
    """Async HTTP client for the public form API."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> APIClient:
        self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def health_check(self) -> bool:
        try:
            resp = await self._client.get("/health")  # type: ignore[union-attr]
            return resp.status_code == 200 and resp.json().get("status") == "ok"
        except (httpx.ConnectError, httpx.TimeoutException):
            return False

    async def get_form(self, form_ref: str) -> dict:
        resp = await self._client.get(f"/api/v1/public/forms/{form_ref}")  # type: ignore[union-attr]
        resp.raise_for_status()
        return resp.json()

    async def submit(
        self,
        form_ref: str,
        payload: dict[str, Any],
        files: list[tuple[str, tuple[str, bytes, str]]],
    ) -> httpx.Response:
        return await self._client.post(  # type: ignore[union-attr]
            f"/api/v1/public/forms/{form_ref}/responses",
            data={"payload": json.dumps(payload)},
            files=files or None,
        )


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

async def run_once(
    client: APIClient,
    form_ref: str,
    controls: list[dict],
    gen: AnswerGenerator,
    run_index: int,
    console: Console,
    verbose: bool,
) -> SubmitResult:
    answers, reasons, with_files = gen.build(controls)
    files = [
        (f"attachments.{field_id}", (f"note-{run_index}.txt", b"hello from fill_form", "text/plain"))
        for field_id in with_files
    ]
    payload = {
        "answers": answers,
        "reasons": reasons,
        "submitted_by_name": f"Smoke Test {run_index}",
        "submitted_by_email": f"smoke{run_index}@example.com",
    }
    if verbose:
        console.print(f"  [dim]payload:[/] {json.dumps(payload, ensure_ascii=False)}")

    resp = await client.submit(form_ref, payload, files)
    result = SubmitResult(run_index=run_index, status_code=resp.status_code, attachments=len(files))
    body = resp.json()
    if result.ok:
        result.response_id = body["response_id"]
        console.print(f"  [green]✓[/] run {run_index}: response {result.response_id}")
    else:
        result.errors = body.get("errors", {})
        console.print(f"  [red]✗[/] run {run_index}: {resp.status_code} {body.get('detail')}")
    return result


def print_summary(console: Console, results: list[SubmitResult]) -> None:
    console.print()
    console.rule("[bold]Submission Summary")
    table = Table(show_lines=False)
    table.add_column("Run", justify="right")
    table.add_column("Status")
    table.add_column("Response ID")
    table.add_column("Files", justify="right")
    table.add_column("Errors")
    for r in results:
        status = f"[green]{r.status_code}[/]" if r.ok else f"[red]{r.status_code}[/]"
        table.add_row(
            str(r.run_index),
            status,
            r.response_id or "-",
            str(r.attachments),
            ", ".join(f"{k}: {v}" for k, v in r.errors.items()) or "-",
        )
    console.print(table)
    passed = sum(1 for r in results if r.ok)
    console.print(f"  [green]Passed:[/] {passed}  [red]Failed:[/] {len(results) - passed}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Submit random responses to a public form")
    parser.add_argument("form_ref", help="form UUID or slug")
    parser.add_argument("--base-url", default="http://localhost:8080")
    parser.add_argument("-n", "--runs", type=int, default=1)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--invalid", action="store_true", help="also submit an empty payload")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    console = Console()
    seed = args.seed if args.seed is not None else random.randrange(2**32)
    console.print(f"[dim]RNG seed: {seed}[/]")
    gen = AnswerGenerator(random.Random(seed))

    async with APIClient(args.base_url) as client:
        if not await client.health_check():
            console.print(f"[red]Server health check failed[/] ({args.base_url})")
            sys.exit(1)

        form = await client.get_form(args.form_ref)
        controls = [c for page in form["pages"] for c in page["controls"]]
        console.print(
            f"[bold]{form['name']}[/] — {len(form['fields'])} fields on "
            f"{form['total_pages']} page(s)"
        )

        results = [
            await run_once(client, args.form_ref, controls, gen, i, console, args.verbose)
            for i in range(1, args.runs + 1)
        ]

        if args.invalid:
            resp = await client.submit(args.form_ref, {"answers": {}}, [])
            required = {c["field_id"] for c in controls if c.get("required")}
            errors = resp.json().get("errors", {})
            if resp.status_code == 422 and required <= set(errors):
                console.print("  [green]✓[/] empty submission rejected with all required fields")
            else:
                console.print(f"  [red]✗[/] empty submission: {resp.status_code} {errors}")
                results.append(SubmitResult(run_index=0, status_code=resp.status_code, errors=errors))

    print_summary(console, results)
    if not all(r.ok for r in results):
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
