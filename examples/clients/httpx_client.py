#!/usr/bin/env python3
"""
LOLDrivers Catalog REST API Client using httpx

This example demonstrates how to query the catalog API for statistics
and filtered search results using the httpx async client.

Requirements:
    pip install httpx
"""

import httpx
import asyncio
import sys
from typing import Optional, Dict, Any


async def search_catalog(
    query: str,
    api_url: str = "http://localhost:8080",
    filters: Optional[Dict[str, bool]] = None,
    limit: int = 20,
) -> Optional[Dict[str, Any]]:
    """
    Search the catalog and print a summary of the matches.

    Args:
        query: Free-text query (filename, company, hash, CVE, import, ...)
        api_url: Base URL of the catalog API
        filters: Filter names to enable, e.g. {"hvci": True, "killer": True}
        limit: Page size

    Returns:
        Search response dictionary or None if the API reported a failure
    """
    params: Dict[str, Any] = {"q": query, "limit": limit}
    for name, enabled in (filters or {}).items():
        if enabled:
            params[name] = "true"

    async with httpx.AsyncClient(base_url=api_url, timeout=30.0) as client:
        stats = await client.get("/api/stats")
        stats.raise_for_status()
        summary = stats.json()["stats"]
        print(f"Catalog: {summary['total']} samples, {summary['hvciCompatible']} load despite HVCI, "
              f"{summary['killerDrivers']} killer drivers")

        response = await client.get("/api/drivers", params=params)
        response.raise_for_status()
        data = response.json()

        if not data.get("success"):
            print(f"Search failed: {data.get('message', 'Unknown error')}")
            return None

        print(f"{data['total']} match(es) for '{query}' (cache: {response.headers.get('X-Cache', '-')})")
        for driver in data["drivers"]:
            name = driver.get("OriginalFilename") or driver.get("Filename") or "Unknown"
            print(f"  - {name:<30} {driver.get('Company', '-'):<30} {driver.get('SHA256', '')}")
        if data.get("hasMore"):
            print("  ... more results available")

        return data


async def main():
    """Main entry point for the client."""
    if len(sys.argv) < 2:
        print("Usage: python httpx_client.py <query> [api_url]")
        print("Example: python httpx_client.py razer")
        sys.exit(1)

    query = sys.argv[1]
    api_url = sys.argv[2] if len(sys.argv) > 2 else "http://localhost:8080"

    print("LOLDrivers Catalog API Client")
    print(f"API: {api_url}")
    print("-" * 50)

    try:
        result = await search_catalog(query, api_url)
        sys.exit(0 if result is not None else 1)
    except httpx.HTTPError as e:
        print(f"\nHTTP Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
