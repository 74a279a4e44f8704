"""Tests for textual reference search."""

from pathlib import Path

import pytest

from script_usage_checker.scanner.reference_finder import (
    CorpusReadError,
    ReferenceFinder,
    reference_patterns,
)


def _write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_bytes(text.encode("utf-8"))
    return path


class TestReferencePatterns:
    """Tests for mention patterns."""

    def test_patterns(self) -> None:
        """Member access, construction and declaration forms."""
        assert reference_patterns("Foo") == ("Foo.", "new Foo(", "Foo ")


class TestReferenceFinder:
    """Tests for the reference finder."""

    def test_finds_each_pattern(self, tmp_path: Path) -> None:
        """Every pattern produces a hit on its line."""
        user = _write(tmp_path, "User.cs", (
            "class User\n"
            "{\n"
            "    Inventory bag;\n"
            "    void Fill() { bag = new Inventory(); }\n"
            "    int Count() => Inventory.Max;\n"
            "    void Log(Inventory)\n"
            "}\n"
        ))
        finder = ReferenceFinder([user])

        hits = finder.find_references("Inventory")

        assert [h.line_number for h in hits] == [3, 4, 5]
        assert hits[0].file_name == "User.cs"
        assert hits[0].text == "Inventory bag;"

    def test_one_hit_per_line(self, tmp_path: Path) -> None:
        """A line matching several patterns counts once."""
        user = _write(tmp_path, "User.cs", "Inventory bag = new Inventory(); Inventory.Reset();\n")
        finder = ReferenceFinder([user])

        assert len(finder.find_references("Inventory")) == 1

    def test_excludes_own_file(self, tmp_path: Path) -> None:
        """A self-mention does not count."""
        own = _write(tmp_path, "Inventory.cs", "public class Inventory { Inventory.Max; }\n")
        finder = ReferenceFinder([own])

        assert finder.find_references("Inventory", exclude=own) == []

    def test_exclude_matches_relative_paths(self, tmp_path: Path, monkeypatch) -> None:
        """Relative and absolute spellings of the own file are the same file."""
        _write(tmp_path, "Inventory.cs", "Inventory.Max;\n")
        monkeypatch.chdir(tmp_path)
        finder = ReferenceFinder([tmp_path / "Inventory.cs"])

        assert finder.find_references("Inventory", exclude=Path("Inventory.cs")) == []

    def test_prefix_collision_is_a_hit(self, tmp_path: Path) -> None:
        """Substring matching also matches longer names."""
        other = _write(tmp_path, "Other.cs", "var x = FooBar.Create();\n")
        finder = ReferenceFinder([other])

        assert len(finder.find_references("Bar")) == 1

    def test_parameter_use_is_missed(self, tmp_path: Path) -> None:
        """A name followed by a parenthesis is not a mention."""
        other = _write(tmp_path, "Other.cs", "void Take(Foo)\n")
        finder = ReferenceFinder([other])

        assert finder.find_references("Foo") == []

    def test_text_trimmed_and_quotes_doubled(self, tmp_path: Path) -> None:
        """Hit text is trimmed with quotes doubled."""
        other = _write(tmp_path, "Other.cs", '\t  Debug.Log("hit " + Score.Value);   \n')
        finder = ReferenceFinder([other])

        hits = finder.find_references("Score")

        assert hits[0].text == 'Debug.Log(""hit "" + Score.Value);'
        assert str(hits[0]) == 'Other.cs:1「Debug.Log(""hit "" + Score.Value);」'

    def test_line_numbers_with_crlf_and_bom(self, tmp_path: Path) -> None:
        """Windows line endings and a BOM do not shift line numbers."""
        other = tmp_path / "Other.cs"
        other.write_bytes("\ufeffusing X;\r\n\r\nvar s = Score.Value;\r\n".encode("utf-8"))
        finder = ReferenceFinder([other])

        hits = finder.find_references("Score")

        assert hits[0].line_number == 3
        assert hits[0].text == "var s = Score.Value;"

    def test_files_in_path_order(self, tmp_path: Path) -> None:
        """Hits are ordered by file path, then line."""
        b = _write(tmp_path, "B.cs", "Score.A;\nScore.B;\n")
        a = _write(tmp_path, "A.cs", "Score.C;\n")
        finder = ReferenceFinder([b, a])

        hits = finder.find_references("Score")

        assert [(h.file_name, h.line_number) for h in hits] == [("A.cs", 1), ("B.cs", 1), ("B.cs", 2)]

    def test_unreadable_file_skipped(self, tmp_path: Path, caplog) -> None:
        """By default an unreadable file is skipped with a warning."""
        good = _write(tmp_path, "Good.cs", "Score.Value;\n")
        finder = ReferenceFinder([tmp_path / "Missing.cs", good])

        hits = finder.find_references("Score")

        assert len(hits) == 1
        assert "Missing.cs" in caplog.text

    def test_unreadable_file_strict(self, tmp_path: Path) -> None:
        """In strict mode an unreadable file aborts."""
        finder = ReferenceFinder([tmp_path / "Missing.cs"], strict=True)

        with pytest.raises(CorpusReadError):
            finder.find_references("Score")

    def test_file_read_once(self, tmp_path: Path) -> None:
        """Lines are cached between lookups."""
        other = _write(tmp_path, "Other.cs", "Score.Value;\n")
        finder = ReferenceFinder([other])

        finder.find_references("Score")
        other.write_text("nothing here\n", encoding="utf-8")

        assert len(finder.find_references("Score")) == 1
