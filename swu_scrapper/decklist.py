"""
Lecture des decklists au format texte de Star Wars Unlimited.

Le texte extrait des pages est découpé en sections introduites par
un titre seul sur sa ligne (`Leaders`, `Base`, `Deck`, `Sideboard`).
Chaque ligne de carte a la forme `3 | Nom` ou `3 | Nom | Sous-titre`.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from swu_scrapper.exceptions import EmptyDecklistError

SECTIONS = {
    "Leaders": "leaders",
    "Base": "base",
    "Deck": "deck",
    "Sideboard": "sideboard",
}

SEPARATOR = " | "

# Marque d'ordre des octets laissée en tête par certains éditeurs
BOM = "\ufeff"

# Lecture permissive du nombre d'exemplaires : "3x" donne 3
COUNT_PATTERN = re.compile(r"[+-]?\d+")


@dataclass(frozen=True)
class Card:
    """Classe pour représenter une ligne de carte."""

    count: int
    name: str
    subtitle: Optional[str] = None

    @property
    def key(self) -> str:
        """Propriété qui retourne le nom complet de la carte."""
        if self.subtitle:
            return f"{self.name}{SEPARATOR}{self.subtitle}"
        return self.name


@dataclass(frozen=True)
class Decklist:
    """Classe pour représenter une decklist découpée en sections."""

    leaders: Tuple[Card, ...] = ()
    base: Tuple[Card, ...] = ()
    deck: Tuple[Card, ...] = ()
    sideboard: Tuple[Card, ...] = ()

    @property
    def main_deck(self) -> Tuple[Card, ...]:
        """Propriété qui regroupe leaders, base et deck."""
        return self.leaders + self.base + self.deck

    @property
    def is_empty(self) -> bool:
        """Propriété qui vérifie qu'aucune carte n'a été lue."""
        return not (self.main_deck or self.sideboard)


def parse_count(field: str) -> Optional[int]:
    """Fonction qui lit le nombre d'exemplaires en tête de ligne."""
    match = COUNT_PATTERN.match(field.strip())
    if match is None:
        return None
    return int(match.group())


def parse_line(line: str) -> Optional[Card]:
    """Fonction qui lit une ligne de carte, None si la ligne est à ignorer."""
    parts = line.strip().split(SEPARATOR)
    if len(parts) < 2:
        return None

    count = parse_count(parts[0])
    if count is None or count < 1:
        return None

    subtitle = parts[2] if len(parts) > 2 and parts[2] else None
    return Card(count=count, name=parts[1], subtitle=subtitle)


def parse_decklist(text: str) -> Decklist:
    """
    Fonction qui découpe le texte d'une decklist en sections.

    Les lignes vides, les lignes lues avant le premier titre et les
    lignes de carte mal formées sont ignorées sans erreur.
    """
    sections = {name: [] for name in SECTIONS.values()}
    current = None

    for line in text.splitlines():
        line = line.strip().lstrip(BOM).strip()
        if not line:
            continue

        if line in SECTIONS:
            current = SECTIONS[line]
        elif current is not None:
            card = parse_line(line)
            if card is not None:
                sections[current].append(card)

    return Decklist(**{name: tuple(cards) for name, cards in sections.items()})


def read_decklist(path) -> Decklist:
    """Fonction qui lit un fichier de decklist encodé en UTF-8."""
    with open(path, "r", encoding="utf-8-sig") as decklist_file:
        text = decklist_file.read()

    if not text.strip():
        raise EmptyDecklistError(path)

    return parse_decklist(text)
