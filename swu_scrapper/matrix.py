"""
Agrégation des decklists en une matrice de fréquence des cartes.

Pour chaque carte, on compte dans combien de listes elle apparaît
(deck principal et sideboard séparément) ainsi que la moyenne, la
médiane et le mode du nombre d'exemplaires joués.
"""

import glob
import logging
import os
import statistics
from collections import Counter
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List

from swu_scrapper.decklist import Card, Decklist, read_decklist
from swu_scrapper.exceptions import (
    EmptyDecklistError,
    MissingDirectoryError,
    NoDecklistError,
)

LOGGER = logging.getLogger(__name__)

CSV_HEADER = (
    "Card Name,Main Deck Count,Main Deck %,Main Deck Avg Copies,"
    "Main Deck Median,Main Deck Mode,Sideboard Count,Sideboard %,"
    "Sideboard Avg Copies,Sideboard Median,Sideboard Mode"
)


def _fixed(value: float) -> str:
    """Fonction qui arrondit à deux décimales, demi arrondi vers le haut."""
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def median(values: List[int]) -> float:
    """Fonction qui retourne la médiane, 0 pour une liste vide."""
    if not values:
        return 0
    return statistics.median(values)


def mode(values: List[int]) -> int:
    """
    Fonction qui retourne la valeur la plus fréquente, 0 pour une liste vide.

    En cas d'égalité, la première valeur rencontrée l'emporte.
    """
    if not values:
        return 0
    # most_common conserve l'ordre d'insertion entre valeurs ex aequo
    return Counter(values).most_common(1)[0][0]


@dataclass
class CardTally:
    """Compteurs d'une carte pour un des deux ensembles (main ou sideboard)."""

    count: int = 0
    total_copies: int = 0
    copies: List[int] = field(default_factory=list)

    def add(self, card: Card) -> None:
        """Ajoute une ligne de carte aux compteurs."""
        self.count += 1
        self.total_copies += card.count
        self.copies.append(card.count)

    @property
    def average(self) -> float:
        """Propriété qui retourne le nombre moyen d'exemplaires."""
        if self.count == 0:
            return 0
        return self.total_copies / self.count

    @property
    def median(self) -> float:
        """Propriété qui retourne la médiane des exemplaires."""
        return median(self.copies)

    @property
    def mode(self) -> int:
        """Propriété qui retourne le mode des exemplaires."""
        return mode(self.copies)


@dataclass(frozen=True)
class MatrixRow:
    """Ligne de la matrice pour une carte."""

    card_name: str
    main_deck_count: int
    main_deck_percent: str
    main_deck_total_copies: int
    main_deck_avg_copies: str
    main_deck_median: str
    main_deck_mode: str
    sideboard_count: int
    sideboard_percent: str
    sideboard_total_copies: int
    sideboard_avg_copies: str
    sideboard_median: str
    sideboard_mode: str

    def to_csv(self) -> str:
        """Conversion de la ligne au format CSV."""
        name = self.card_name.replace('"', '""')
        return ",".join(
            [
                f'"{name}"',
                str(self.main_deck_count),
                self.main_deck_percent,
                self.main_deck_avg_copies,
                self.main_deck_median,
                self.main_deck_mode,
                str(self.sideboard_count),
                self.sideboard_percent,
                self.sideboard_avg_copies,
                self.sideboard_median,
                self.sideboard_mode,
            ]
        )


class Matrix:
    """Classe qui accumule les statistiques de toutes les decklists."""

    def __init__(self) -> None:
        self.main_deck: Dict[str, CardTally] = {}
        self.sideboard: Dict[str, CardTally] = {}
        self.total_decklists = 0

    def fold(self, decklist: Decklist) -> None:
        """
        Ajoute une decklist à la matrice.

        Chaque ligne compte pour une inclusion : une carte présente sur
        deux lignes d'une même liste est comptée deux fois.
        """
        for card in decklist.main_deck:
            self.main_deck.setdefault(card.key, CardTally()).add(card)

        for card in decklist.sideboard:
            self.sideboard.setdefault(card.key, CardTally()).add(card)

        self.total_decklists += 1

    @property
    def card_names(self) -> List[str]:
        """Propriété qui retourne les cartes vues, dans l'ordre d'apparition."""
        names = dict.fromkeys(self.main_deck)
        names.update(dict.fromkeys(self.sideboard))
        return list(names)

    def percent(self, count: int) -> str:
        """Fonction qui formate un taux d'inclusion."""
        if self.total_decklists == 0:
            return "0.00%"
        return f"{_fixed(count / self.total_decklists * 100)}%"

    def row(self, card_name: str) -> MatrixRow:
        """Fonction qui calcule la ligne d'une carte."""
        main = self.main_deck.get(card_name, CardTally())
        side = self.sideboard.get(card_name, CardTally())

        return MatrixRow(
            card_name=card_name,
            main_deck_count=main.count,
            main_deck_percent=self.percent(main.count),
            main_deck_total_copies=main.total_copies,
            main_deck_avg_copies=_fixed(main.average),
            main_deck_median=_fixed(main.median),
            main_deck_mode=str(main.mode),
            sideboard_count=side.count,
            sideboard_percent=self.percent(side.count),
            sideboard_total_copies=side.total_copies,
            sideboard_avg_copies=_fixed(side.average),
            sideboard_median=_fixed(side.median),
            sideboard_mode=str(side.mode),
        )

    def rows(self) -> List[MatrixRow]:
        """Fonction qui retourne les lignes triées par présence en deck principal."""
        rows = [self.row(card_name) for card_name in self.card_names]
        return sorted(
            rows, key=lambda row: (-row.main_deck_count, -row.sideboard_count)
        )


def sort_by_sideboard(rows: List[MatrixRow]) -> List[MatrixRow]:
    """Fonction qui retrie les lignes par présence en sideboard."""
    return sorted(rows, key=lambda row: -row.sideboard_count)


def build_matrix(decklists_dir: str) -> Matrix:
    """Fonction qui lit toutes les decklists d'un dossier."""
    if not os.path.isdir(decklists_dir):
        raise MissingDirectoryError(decklists_dir)

    files = sorted(glob.glob(os.path.join(decklists_dir, "*.txt")))
    LOGGER.info("Found %d decklist files to process", len(files))

    matrix = Matrix()
    for file in files:
        LOGGER.debug("Processing: %s", os.path.basename(file))
        try:
            decklist = read_decklist(file)
        except EmptyDecklistError as error:
            LOGGER.warning("%s", error)
            continue
        except (OSError, UnicodeDecodeError) as error:
            LOGGER.error("Error processing file %s: %s", file, error)
            continue

        if decklist.is_empty:
            LOGGER.warning("No card found in %s", file)

        matrix.fold(decklist)

    if matrix.total_decklists == 0:
        raise NoDecklistError(decklists_dir)

    return matrix


def write_csv(rows: List[MatrixRow], path: str) -> None:
    """Procédure qui écrit la matrice au format CSV."""
    with open(path, "w", encoding="utf-8", newline="") as csv_file:
        csv_file.write(CSV_HEADER + "\n")
        for row in rows:
            csv_file.write(row.to_csv() + "\n")
    LOGGER.info("Matrix has been saved to: %s", path)


def _describe(total: int, count: int, percent: str, stats: List[str]) -> List[str]:
    avg, med, mod = stats
    return [
        f"{count}/{total} decks ({percent})",
        f"   Avg: {avg}, Median: {med}, Mode: {mod} copies",
    ]


def report(
    matrix: Matrix,
    rows: List[MatrixRow],
    top_main: int = 10,
    top_sideboard: int = 5,
) -> str:
    """Fonction qui rédige le résumé affiché en console."""
    total = matrix.total_decklists
    lines = [
        "=== Card Frequency Analysis ===",
        f"Total unique cards: {len(rows)}",
        f"Total decklists analyzed: {total}",
        "",
        f"Top {top_main} Most Common Cards in Main Deck:",
        "-" * 40,
    ]

    def main_lines(row: MatrixRow) -> List[str]:
        head, tail = _describe(
            total,
            row.main_deck_count,
            row.main_deck_percent,
            [row.main_deck_avg_copies, row.main_deck_median, row.main_deck_mode],
        )
        return [f"   Main Deck: {head}", tail]

    def side_lines(row: MatrixRow) -> List[str]:
        head, tail = _describe(
            total,
            row.sideboard_count,
            row.sideboard_percent,
            [row.sideboard_avg_copies, row.sideboard_median, row.sideboard_mode],
        )
        return [f"   Sideboard: {head}", tail]

    for index, row in enumerate(rows[:top_main], start=1):
        lines.append(f"{index}. {row.card_name}")
        lines.extend(main_lines(row))
        if row.sideboard_count > 0:
            lines.extend(side_lines(row))

    lines.extend(
        [
            "",
            f"Top {top_sideboard} Most Common Sideboard Cards:",
            "-" * 40,
        ]
    )
    sideboard_rows = [row for row in sort_by_sideboard(rows) if row.sideboard_count > 0]
    for index, row in enumerate(sideboard_rows[:top_sideboard], start=1):
        lines.append(f"{index}. {row.card_name}")
        lines.extend(side_lines(row))
        if row.main_deck_count > 0:
            lines.extend(main_lines(row))

    return "\n".join(lines)
