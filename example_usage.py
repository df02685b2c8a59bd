#!/usr/bin/env python3
"""
Basic usage examples for the SERPmetrics Python client library.

Reads credentials from SERPMETRICS_KEY and SERPMETRICS_SECRET and makes a
few authenticated requests against the live API.
"""

import logging
import os
import sys

from serpmetrics import SMClientError, create_client


def main():
    """Run basic usage examples."""

    key = os.environ.get("SERPMETRICS_KEY")
    secret = os.environ.get("SERPMETRICS_SECRET")
    if not key or not secret:
        print("Set SERPMETRICS_KEY and SERPMETRICS_SECRET first.")
        sys.exit(1)

    print("=== SERPmetrics Python Client Usage Examples ===\n")

    with create_client({'key': key, 'secret': secret}, rate_limit=5, timeout=10000) as client:
        print(f"1. Client created for: {client.config['base_url']}")
        print(f"   Minimum spacing: {client.min_interval_ms:.0f}ms\n")

        try:
            print("2. Fetching credit balance...")
            response = client.credit().result()
            print(f"   Status: {response.status_code}")
            print(f"   Body: {response.text}\n")

            print("3. Adding a keyword...")
            response = client.add("python http client", "google_en-us").result()
            print(f"   Status: {response.status_code}")
            print(f"   Body: {response.text}\n")

            print("4. Fetching daily flux...")
            # Issued right after add(), so this one waits for the next window
            response = client.flux("google_en-us").result()
            print(f"   Status: {response.status_code}")
            print(f"   Body: {response.text}\n")

        except SMClientError as e:
            print(f"   ✗ Request failed: {e}")


def demonstrate_callbacks():
    """Demonstrate callback delivery and coalescing."""

    print("\n=== Callback Example ===")

    def on_done(error, response):
        if error is not None:
            print(f"   ✗ {error}")
        else:
            print(f"   ✓ {response.status_code}")

    credentials = (os.environ["SERPMETRICS_KEY"], os.environ["SERPMETRICS_SECRET"])
    with create_client(credentials, rate_limit=1) as client:
        futures = [client.credit(callback=on_done) for _ in range(3)]
        # the middle call is coalesced away
        futures[-1].result()
        print(f"   Cancelled: {[f.cancelled() for f in futures]}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    main()
    demonstrate_callbacks()
