#!/usr/bin/env python3
"""
Smoke test for a running bulletin service.

Walks the main flow against a live instance:
1. Delete all messages
2. Create a batch of messages (half urgent)
3. Page through the full listing and check ordering/overlap
4. Run every search mode
5. Look up one message by id, and a missing one
6. Delete all and confirm the listing is empty
"""

import argparse
import asyncio
import json
import sys
import uuid
from typing import Any, Dict, List, Optional
import httpx
from rich.console import Console
from rich.table import Table
from rich import box


console = Console()


class MessageFlowChecker:
    """Drives the bulletin HTTP API and records step results."""

    def __init__(self, base_url: str, count: int):
        self.base_url = base_url
        self.count = count
        self.http_client: Optional[httpx.AsyncClient] = None
        self.results: List[Dict[str, Any]] = []

    async def setup(self) -> bool:
        self.http_client = httpx.AsyncClient(base_url=self.base_url, timeout=30.0)
        try:
            response = await self.http_client.get("/live")
        except httpx.HTTPError as e:
            console.print(f"✗ Service unreachable: {e}", style="red")
            return False

        if response.status_code != 200:
            console.print(f"✗ Liveness check failed: {response.status_code}", style="red")
            return False

        console.print("✓ Service reachable", style="green")
        return True

    async def cleanup(self):
        if self.http_client:
            await self.http_client.aclose()

    async def read_events(self, method: str, url: str, **kwargs) -> List[Dict[str, Any]]:
        """Consume an event-stream response and return the decoded payloads."""
        events = []
        async with self.http_client.stream(method, url, **kwargs) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if line.startswith("data:"):
                    events.append(json.loads(line[len("data:"):].strip()))
        return events

    def record(self, step: str, success: bool, detail: str = ""):
        self.results.append({"step": step, "success": success, "detail": detail})
        style = "green" if success else "red"
        console.print(f"  {'✓' if success else '✗'} {step} {detail}", style=style)

    async def run(self):
        await self.http_client.delete("/messages")
        self.record("delete all", True)

        created = []
        for i in range(self.count):
            payload = {
                "target": f"  Target{i % 3}@Example.com ",
                "sender": f"sender{i % 2}@example.com",
                "title": f"flow-{i}",
                "urgent": i % 2 == 0,
                "extraAttributes": {"run": str(uuid.uuid4())[:8], "index": i},
            }
            events = await self.read_events("POST", "/messages", json=payload)
            created.extend(events)
        self.record("create", len(created) == self.count, f"{len(created)}/{self.count}")

        pages = []
        page = 0
        while True:
            batch = await self.read_events("GET", "/messages", params={"page": page, "size": 4})
            if not batch:
                break
            pages.extend(batch)
            page += 1
        ids = [m["id"] for m in pages]
        self.record("paging", len(ids) == len(set(ids)) == self.count, f"{len(ids)} ids over {page} pages")

        order = [(m["publicationTimestamp"], m["id"]) for m in pages]
        expected = sorted(order, key=lambda item: item[1])
        expected.sort(key=lambda item: item[0], reverse=True)
        self.record("ordering", order == expected)

        for mode, value in [
            ("byRecipient", "TARGET0@example.com"),
            ("bySender", "sender1@example.com"),
            ("byUrgent", None),
            ("urgentOnlyByRecipient", "target1@example.com"),
            ("urgentOnlyBySender", "sender0@example.com"),
        ]:
            params = {"search": mode, "size": 100}
            if value:
                params["value"] = value
            events = await self.read_events("GET", "/messages", params=params)
            self.record(f"search {mode}", True, f"{len(events)} messages")

        if created:
            found = await self.read_events(
                "GET", "/messages", params={"search": "byId", "value": created[0]["id"]}
            )
            self.record("byId hit", len(found) == 1)

        missing = await self.read_events(
            "GET", "/messages", params={"search": "byId", "value": str(uuid.uuid4())}
        )
        self.record("byId miss", missing == [])

        response = await self.http_client.get("/messages", params={"search": "byTitle", "value": "x"})
        self.record("unknown mode rejected", response.status_code == 400)

        await self.http_client.delete("/messages")
        remaining = await self.read_events("GET", "/messages")
        self.record("delete all empties listing", remaining == [])

    def display_summary(self) -> bool:
        table = Table(title="Bulletin Flow Results", box=box.ROUNDED)
        table.add_column("Step", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Detail", style="dim")

        for result in self.results:
            color = "green" if result["success"] else "red"
            table.add_row(
                result["step"],
                f"[{color}]{'✓' if result['success'] else '✗'}[/{color}]",
                result["detail"]
            )

        console.print(table)
        return all(r["success"] for r in self.results)


async def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--url", default="http://localhost:8000", help="Service base URL")
    parser.add_argument("--count", type=int, default=10, help="Messages to create")
    args = parser.parse_args()

    checker = MessageFlowChecker(args.url, args.count)
    try:
        if not await checker.setup():
            sys.exit(1)
        await checker.run()
        if not checker.display_summary():
            sys.exit(1)
    except httpx.HTTPError as e:
        console.print(f"\n[red]Flow failed: {e}[/red]")
        sys.exit(1)
    finally:
        await checker.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
