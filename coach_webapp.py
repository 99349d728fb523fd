#!/usr/bin/env python3
"""Run the coach Flask app locally."""

from __future__ import annotations

from coach.webapp import create_app, load_runtime_config

app = create_app()


def main() -> None:
    runtime = load_runtime_config()
    app.run(host=runtime.host, port=runtime.port, debug=runtime.env != "production")


if __name__ == "__main__":
    main()
