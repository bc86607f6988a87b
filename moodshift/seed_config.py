"""Write the default config documents into the document store.

Usage:
    python -m moodshift.seed_config                 # seed missing documents
    python -m moodshift.seed_config --force         # overwrite all six
    python -m moodshift.seed_config --only voices prosody
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from moodshift.config import settings
from moodshift.remote_config import CONFIG_COLLECTION
from moodshift.remote_config_defaults import CONFIG_NAMES, default_document
from moodshift.runtime import open_document_store
from moodshift.storage import DocumentStore, StorageError

log = logging.getLogger(__name__)


async def seed(
    store: DocumentStore,
    names: list[str] | tuple[str, ...] = CONFIG_NAMES,
    *,
    force: bool = False,
) -> dict[str, str]:
    """Seed each named document; returns ``{name: "written" | "kept"}``."""
    results: dict[str, str] = {}
    for name in names:
        if not force and await store.get(CONFIG_COLLECTION, name) is not None:
            log.info("config/%s exists, keeping it", name)
            results[name] = "kept"
            continue
        await store.set(CONFIG_COLLECTION, name, default_document(name))
        log.info("config/%s written", name)
        results[name] = "written"
    return results


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed MoodShift config documents")
    parser.add_argument(
        "--data-dir",
        default=settings.data_dir,
        help="Directory holding the document store (default: %(default)s)",
    )
    parser.add_argument(
        "--only",
        nargs="+",
        choices=CONFIG_NAMES,
        metavar="NAME",
        help=f"Seed only these documents ({', '.join(CONFIG_NAMES)})",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite documents that already exist",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )

    store = open_document_store(args.data_dir)
    try:
        results = asyncio.run(seed(store, args.only or CONFIG_NAMES, force=args.force))
    except StorageError as exc:
        log.error("Seeding failed: %s", exc)
        sys.exit(1)

    for name, outcome in results.items():
        print(f"config/{name}: {outcome}")


if __name__ == "__main__":
    main()
