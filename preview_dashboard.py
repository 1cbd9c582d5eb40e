#!/usr/bin/env python3
"""
Render the dashboard once against the live APIs and write it to disk.
Usage: python preview_dashboard.py [output.html]

Examples:
  python preview_dashboard.py                 # Writes market_board.html
  NEWS_LIMIT=10 python preview_dashboard.py /tmp/board.html
"""

import sys

from market_board.handler import dashboard_handler


def main():
    output = sys.argv[1] if len(sys.argv) > 1 else "market_board.html"

    response = dashboard_handler({}, None)
    if response["statusCode"] != 200:
        print(f"Rendering failed ({response['statusCode']}): {response['body']}")
        sys.exit(1)

    with open(output, "w", encoding="utf-8") as f:
        f.write(response["body"])
    print(f"Dashboard written to {output}")


if __name__ == "__main__":
    main()
