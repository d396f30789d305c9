"""Récupération des pages de decklists et extraction du texte des listes."""
import glob
import logging
import os
import time
from threading import Lock, Thread
from typing import List, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from swu_scrapper.decklist import Card, Decklist, parse_decklist, read_decklist
from swu_scrapper.exceptions import (
    EmptyDecklistError,
    MissingDirectoryError,
    NoDecklistError,
    ScrapperError,
)
from swu_scrapper.matrix import (
    Matrix,
    MatrixRow,
    build_matrix,
    report,
    sort_by_sideboard,
    write_csv,
)

LOGGER = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        + "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
}

# Balise qui contient l'export texte de la decklist
DECKLIST_SELECTOR = "pre.d-none#decklist-swu-text"

LINKS_FILE = "links.txt"
PAGES_DIR = "pages"
DECKLISTS_DIR = "decklists"
OUTPUT_FILE = "card_matrix.csv"

BATCH_SIZE = 10
DELAY = 1.0
TIMEOUT = 30


class Soupe:
    """Classe qui contient les informations pour le scrapping."""

    def __init__(self, link: str) -> None:
        self.link = link
        self._response = None
        self._soup = None

    @property
    def encoding(self) -> str:
        """Propriété contenant l'encoding des pages."""
        return "utf-8"

    @property
    def response(self) -> requests.Response:
        """Propriété qui récupère la page demandée."""
        if self._response is None:
            req = requests.get(self.link, headers=HEADERS, timeout=TIMEOUT)
            req.raise_for_status()
            req.encoding = self.encoding
            self._response = req
        return self._response

    @property
    def content(self) -> str:
        """Propriété qui retourne le contenu brut de la page."""
        return self.response.text

    @property
    def soup(self) -> BeautifulSoup:
        """Propriété qui retourne la page sous forme de soupe."""
        if self._soup is None:
            self._soup = BeautifulSoup(self.content, "html.parser")
        return self._soup


class Page:
    """Classe pour représenter une page enregistrée sur le disque."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._soup = None

    @property
    def name(self) -> str:
        """Propriété qui retourne le nom de la page sans extension."""
        return os.path.splitext(os.path.basename(self.path))[0]

    @property
    def soup(self) -> BeautifulSoup:
        """Propriété qui lit la page enregistrée."""
        if self._soup is None:
            with open(self.path, "r", encoding="utf-8-sig") as html_file:
                self._soup = BeautifulSoup(html_file.read(), "html.parser")
        return self._soup

    @property
    def decklist(self) -> Optional[str]:
        """Propriété qui retourne le texte de la decklist, None si absent."""
        tag = self.soup.select_one(DECKLIST_SELECTOR)
        if tag is None:
            return None
        text = tag.get_text().strip()
        return text or None


def read_links(path: str) -> List[str]:
    """Fonction qui lit la liste des liens à récupérer."""
    with open(path, "r", encoding="utf-8-sig") as links_file:
        return [line.strip() for line in links_file if line.strip()]


def page_name(url: str) -> str:
    """Fonction qui déduit le nom du fichier de la page depuis son lien."""
    segments = [segment for segment in urlparse(url).path.split("/") if segment]
    return segments[-1] if segments else "index"


def fetch_pages(
    links: List[str],
    output_dir: str = PAGES_DIR,
    batch_size: int = BATCH_SIZE,
    delay: float = DELAY,
) -> List[str]:
    """
    Fonction qui télécharge les pages et les enregistre en HTML.

    Les liens sont traités par groupes de `batch_size` threads, avec une
    pause de `delay` secondes entre deux groupes. Un lien en erreur est
    ignoré.
    """
    os.makedirs(output_dir, exist_ok=True)
    LOGGER.info("Found %d links to process", len(links))

    # Un seul lien par nom de fichier, le premier rencontré
    targets = {}
    for link in links:
        path = os.path.join(output_dir, f"{page_name(link)}.html")
        if path in targets:
            LOGGER.warning(
                "Skipping %s: %s already comes from %s", link, path, targets[path]
            )
            continue
        targets[path] = link

    saved = []
    lock = Lock()

    def fetch_page(link: str, path: str) -> None:
        """Procédure appelée lors du threading."""
        LOGGER.info("Fetching: %s", link)
        try:
            content = Soupe(link).content
            with open(path, "w", encoding="utf-8") as html_file:
                html_file.write(content)
        except (requests.RequestException, OSError) as error:
            LOGGER.error("Error fetching %s: %s", link, error)
            return

        with lock:
            saved.append(path)
        LOGGER.info("Successfully saved: %s", path)

    items = [(link, path) for path, link in targets.items()]
    for start in range(0, len(items), batch_size):
        threads = [
            Thread(target=fetch_page, args=item)
            for item in items[start : start + batch_size]
        ]

        for thread in threads:
            thread.start()

        for thread in threads:
            thread.join()

        if delay and start + batch_size < len(items):
            time.sleep(delay)

    return sorted(saved)


def cleanup_text_files(directory: str) -> int:
    """Fonction qui supprime les anciens fichiers texte du dossier."""
    files = glob.glob(os.path.join(directory, "*.txt"))
    for file in files:
        os.remove(file)
        LOGGER.debug("Removed: %s", file)
    LOGGER.info("Cleaned up %d text files from %s", len(files), directory)
    return len(files)


def extract_decklists(
    pages_dir: str = PAGES_DIR, decklists_dir: str = DECKLISTS_DIR
) -> List[str]:
    """Fonction qui extrait la decklist de chaque page enregistrée."""
    if not os.path.isdir(pages_dir):
        raise MissingDirectoryError(pages_dir)

    os.makedirs(decklists_dir, exist_ok=True)
    cleanup_text_files(pages_dir)

    files = sorted(glob.glob(os.path.join(pages_dir, "*.html")))
    LOGGER.info("Found %d HTML files to process", len(files))

    written = []
    for file in files:
        page = Page(file)
        LOGGER.debug("Processing: %s", os.path.basename(file))
        try:
            decklist = page.decklist
        except (OSError, UnicodeDecodeError) as error:
            LOGGER.error("Error extracting content from %s: %s", file, error)
            continue

        if decklist is None:
            LOGGER.warning("No decklist content found in %s", file)
            continue

        path = os.path.join(decklists_dir, f"{page.name}.txt")
        try:
            with open(path, "w", encoding="utf-8") as txt_file:
                txt_file.write(decklist)
        except OSError as error:
            LOGGER.error("Error writing decklist to %s: %s", path, error)
            continue
        written.append(path)
        LOGGER.info("Successfully extracted decklist to: %s", path)

    return written


__all__ = [
    "Card",
    "Decklist",
    "EmptyDecklistError",
    "Matrix",
    "MatrixRow",
    "MissingDirectoryError",
    "NoDecklistError",
    "Page",
    "ScrapperError",
    "Soupe",
    "build_matrix",
    "cleanup_text_files",
    "extract_decklists",
    "fetch_pages",
    "page_name",
    "parse_decklist",
    "read_decklist",
    "read_links",
    "report",
    "sort_by_sideboard",
    "write_csv",
]
