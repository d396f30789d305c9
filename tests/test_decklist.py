import pytest

from swu_scrapper.decklist import Card, Decklist, parse_decklist, parse_line, read_decklist
from swu_scrapper.exceptions import EmptyDecklistError


class TestParseLine:
    def test_name_only(self) -> None:
        assert parse_line("3 | Blaster") == Card(3, "Blaster")

    def test_name_and_subtitle(self) -> None:
        card = parse_line("2 | Rey | Survivor")

        assert card == Card(2, "Rey", "Survivor")
        assert card.key == "Rey | Survivor"

    def test_extra_fields_ignored(self) -> None:
        assert parse_line("1 | Han Solo | Worth the Risk | foil") == Card(
            1, "Han Solo", "Worth the Risk"
        )

    def test_empty_subtitle_is_no_subtitle(self) -> None:
        card = parse_line("1 | Blaster |  | foil")

        assert card.subtitle is None
        assert card.key == "Blaster"

    def test_lenient_count(self) -> None:
        assert parse_line("3x | Blaster") == Card(3, "Blaster")

    def test_invalid_count_skipped(self) -> None:
        assert parse_line("three | Blaster") is None
        assert parse_line("0 | Blaster") is None
        assert parse_line("-2 | Blaster") is None

    def test_missing_separator_skipped(self) -> None:
        assert parse_line("3 Blaster") is None
        assert parse_line("3|Blaster") is None


class TestParseDecklist:
    def test_sections(self) -> None:
        text = "Leaders\n2 | Rey | Survivor\nDeck\n3 | Blaster\n1 | Blaster\n"
        decklist = parse_decklist(text)

        assert decklist.leaders == (Card(2, "Rey", "Survivor"),)
        assert decklist.base == ()
        assert decklist.deck == (Card(3, "Blaster"), Card(1, "Blaster"))
        assert decklist.sideboard == ()

    def test_all_sections(self) -> None:
        text = """Leaders
1 | Sabine Wren | Galvanized Revolutionary

Base
1 | Command Center

Deck
3 | Battlefield Marine
2 | Green Squadron A-Wing

Sideboard
2 | Disabling Fang Fighter
"""
        decklist = parse_decklist(text)

        assert len(decklist.leaders) == 1
        assert decklist.base == (Card(1, "Command Center"),)
        assert [card.name for card in decklist.deck] == [
            "Battlefield Marine",
            "Green Squadron A-Wing",
        ]
        assert decklist.sideboard == (Card(2, "Disabling Fang Fighter"),)
        assert len(decklist.main_deck) == 4

    def test_lines_before_header_skipped(self) -> None:
        decklist = parse_decklist("3 | Blaster\nDeck\n1 | Vader\n")

        assert decklist.deck == (Card(1, "Vader"),)

    def test_no_header_gives_empty_decklist(self) -> None:
        decklist = parse_decklist("3 | Blaster\n2 | Vader\n")

        assert decklist == Decklist()
        assert decklist.is_empty

    def test_empty_text(self) -> None:
        assert parse_decklist("") == Decklist()

    def test_headers_are_case_sensitive(self) -> None:
        decklist = parse_decklist("deck\n3 | Blaster\n")

        assert decklist.is_empty

    def test_header_with_surrounding_whitespace(self) -> None:
        decklist = parse_decklist("  Deck  \r\n3 | Blaster\r\n")

        assert decklist.deck == (Card(3, "Blaster"),)

    def test_repeated_header_accumulates(self) -> None:
        decklist = parse_decklist("Deck\n1 | A\nSideboard\n1 | B\nDeck\n2 | C\n")

        assert decklist.deck == (Card(1, "A"), Card(2, "C"))
        assert decklist.sideboard == (Card(1, "B"),)

    def test_malformed_lines_dropped(self) -> None:
        decklist = parse_decklist("Deck\n3 | Blaster\nnot a card\nx | Vader\n2 | Yoda\n")

        assert decklist.deck == (Card(3, "Blaster"), Card(2, "Yoda"))

    def test_text_with_byte_order_mark(self) -> None:
        decklist = parse_decklist("\ufeffLeaders\n1 | Rey | Survivor\nDeck\n3 | Blaster\n")

        assert decklist.leaders == (Card(1, "Rey", "Survivor"),)
        assert decklist.deck == (Card(3, "Blaster"),)

    def test_parsing_is_idempotent(self) -> None:
        text = "Leaders\n1 | Rey | Survivor\nDeck\n3 | Blaster\n"

        assert parse_decklist(text) == parse_decklist(text)


class TestReadDecklist:
    def test_reads_file(self, tmp_path) -> None:
        path = tmp_path / "deck.txt"
        path.write_text("Deck\n3 | Blaster\n", encoding="utf-8")

        assert read_decklist(path).deck == (Card(3, "Blaster"),)

    def test_blank_file_raises(self, tmp_path) -> None:
        path = tmp_path / "deck.txt"
        path.write_text("  \n\n", encoding="utf-8")

        with pytest.raises(EmptyDecklistError):
            read_decklist(path)

    def test_file_with_byte_order_mark(self, tmp_path) -> None:
        path = tmp_path / "deck.txt"
        path.write_bytes(b"\xef\xbb\xbfLeaders\n1 | Rey | Survivor\nDeck\n3 | Blaster\n")

        decklist = read_decklist(path)

        assert decklist.leaders == (Card(1, "Rey", "Survivor"),)
        assert decklist.deck == (Card(3, "Blaster"),)
