"""
Force a board reset against the configured store, regardless of the marker.

Only the store client is built; no board session is started, so the marker
check cannot issue a reset of its own alongside this one.
"""

from __future__ import annotations

import datetime
import sys

from flask import Flask

from matchboard import configure_app, create_store
from matchboard.board.session import build_reset_document
from matchboard.board.utils import today_string
from matchboard.constants import ROOT_PATH


def main() -> int:
    """Reset the board for today's local date."""
    app = Flask("matchboard")
    configure_app(app)
    store = create_store(app)
    today = today_string(datetime.datetime.now())
    try:
        store.set(ROOT_PATH, build_reset_document(today)).result(
            timeout=app.config["WRITE_TIMEOUT"]
        )
    except Exception as e:
        print(f"Reset failed: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    print(f"Board reset for {today}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
