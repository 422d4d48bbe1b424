from __future__ import annotations

import argparse
import json
from collections.abc import Sequence

from trio_utbm.engine.controller import GameController
from trio_utbm.engine.serialize import public_view
from trio_utbm.engine.types import ALL_MODES
from trio_utbm.paths import get_paths
from trio_utbm.services.content import ContentError, ContentService
from trio_utbm.services.telemetry import TelemetryService


def main(argv: Sequence[str] | None = None) -> int:
    """Set up a game headlessly and print the opening table as JSON."""
    parser = argparse.ArgumentParser(prog="trio-utbm")
    parser.add_argument("--mode", choices=ALL_MODES, default="individual_simple")
    parser.add_argument("--names", nargs="+", default=["Player 1", "Player 2", "Player 3"])
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--viewer", type=int, default=0)
    parser.add_argument("--validate-only", action="store_true")
    parser.add_argument("--no-telemetry", action="store_true")
    args = parser.parse_args(argv)

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        catalog = content.load_catalog()
    except ContentError as e:
        print(e)
        return 2
    if args.validate_only:
        print(f"OK: {len(catalog.all_codes())} courses, {catalog.deck_size()} cards")
        return 0

    telemetry = None
    if not args.no_telemetry:
        telemetry = TelemetryService(paths.telemetry_file)

    controller = GameController(catalog, seed=args.seed, telemetry=telemetry)
    res = controller.initialize_game(len(args.names), args.mode, None, args.names)
    if not res.ok:
        print(res.error)
        return 1
    controller.start_game()

    print(json.dumps(public_view(controller.game, args.viewer), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
