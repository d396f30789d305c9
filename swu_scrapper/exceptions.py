"""Exceptions levées par les différentes étapes du scrapper."""


class ScrapperError(Exception):
    """Classe de base des erreurs du scrapper."""


class MissingDirectoryError(ScrapperError, FileNotFoundError):
    """Le dossier attendu en entrée n'existe pas : rien à traiter."""

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Directory not found: {path}")


class NoDecklistError(ScrapperError):
    """Aucun fichier du dossier n'a donné de decklist exploitable."""

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"No decklist files found in {path}")


class EmptyDecklistError(ScrapperError):
    """Fichier de decklist vide, ignoré lors de l'agrégation."""

    def __init__(self, path) -> None:
        self.path = path
        super().__init__(f"Empty decklist file: {path}")
