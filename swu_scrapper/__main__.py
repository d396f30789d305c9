"""
Module pour l'extraction des decklists de Star Wars Unlimited
en vue d'en tirer une matrice de fréquence des cartes jouées :
récupération des pages, extraction du texte des listes puis
agrégation dans un fichier CSV.
"""

import argparse
import logging
import sys
from typing import List, Optional

from swu_scrapper import (
    BATCH_SIZE,
    DECKLISTS_DIR,
    DELAY,
    LINKS_FILE,
    OUTPUT_FILE,
    PAGES_DIR,
    ScrapperError,
    build_matrix,
    extract_decklists,
    fetch_pages,
    read_links,
    report,
    write_csv,
)

LOGGER = logging.getLogger(__name__)


def init_logger(debug: bool = False) -> None:
    """Initialisation du logger principal."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(asctime)s: %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.ERROR)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Lecture des arguments de la ligne de commande."""
    parser = argparse.ArgumentParser("swu_scrapper")
    parser.add_argument(
        "command",
        choices=["fetch", "extract", "matrix", "all"],
        nargs="?",
        default="all",
        help="Stage to run (default: all three in order).",
    )
    parser.add_argument("--links", default=LINKS_FILE, help="File of URLs to fetch.")
    parser.add_argument("--pages", default=PAGES_DIR, help="Staging directory for pages.")
    parser.add_argument(
        "--decklists", default=DECKLISTS_DIR, help="Directory of extracted decklists."
    )
    parser.add_argument("--output", default=OUTPUT_FILE, help="CSV file to write.")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=BATCH_SIZE,
        help="Number of pages fetched at the same time.",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=DELAY,
        help="Pause in seconds between two batches of requests.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> None:
    """Enchaîne les étapes demandées."""
    if args.command in ("fetch", "all"):
        links = read_links(args.links)
        fetch_pages(links, args.pages, batch_size=args.batch_size, delay=args.delay)

    if args.command in ("extract", "all"):
        extract_decklists(args.pages, args.decklists)

    if args.command in ("matrix", "all"):
        matrix = build_matrix(args.decklists)
        rows = matrix.rows()
        write_csv(rows, args.output)
        print()
        print(report(matrix, rows))


def main(argv: Optional[List[str]] = None) -> int:
    """Fonction principale."""
    args = parse_args(argv)
    init_logger(args.debug)

    try:
        run(args)
    except ScrapperError as error:
        LOGGER.error("%s", error)
        return 1
    except FileNotFoundError as error:
        LOGGER.error("File not found: %s", error.filename)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
