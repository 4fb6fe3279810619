import unittest

from citecheck.references import (
    extract_references,
    main_text_for_search,
    parse_reference_entry,
    segment_reference_lines,
    split_main_and_references,
)


class TestSectionSplitting(unittest.TestCase):
    def test_split_with_footnotes(self) -> None:
        text = "Body text.\nReferences\nSmith, J. (2020). A title here. Journal.\nFootnotes\n1. A note."
        main, refs, notes = split_main_and_references(text)
        self.assertEqual(main, "Body text.")
        self.assertEqual(refs, "Smith, J. (2020). A title here. Journal.")
        self.assertEqual(notes, "1. A note.")

    def test_last_heading_wins(self) -> None:
        text = "Contents\nReferences\nIntro text.\nReferences\nSmith, J. (2020). A title here. Journal."
        main, refs, _ = split_main_and_references(text)
        self.assertEqual(refs, "Smith, J. (2020). A title here. Journal.")
        self.assertTrue(main.endswith("Intro text."))

    def test_heading_is_case_insensitive(self) -> None:
        _, refs, _ = split_main_and_references("Body.\nWORKS CITED:\nSmith, J. (2020). Title.")
        self.assertEqual(refs, "Smith, J. (2020). Title.")

    def test_no_heading(self) -> None:
        self.assertEqual(split_main_and_references("Just text (Smith, 2020)."), ("Just text (Smith, 2020).", "", ""))

    def test_main_text_keeps_footnotes(self) -> None:
        text = "Body text.\nReferences\nRef line.\nFootnotes\nNote text."
        self.assertEqual(main_text_for_search(text), "Body text.\nFootnotes\nNote text.")

    def test_main_text_without_footnotes(self) -> None:
        self.assertEqual(main_text_for_search("Body text.\nBibliography\nRef line."), "Body text.")


class TestSegmentation(unittest.TestCase):
    def test_wrapped_lines_are_joined(self) -> None:
        blob = "\n".join(
            [
                "Smith, J. (2020). A study of things. Journal of Stuff, 1(2), 3-4.",
                "Jones, K., & Lee, M. (2019a). Another study with a long",
                "continued title line.",
            ]
        )
        entries = segment_reference_lines(blob)
        self.assertEqual(len(entries), 2)
        self.assertTrue(entries[0].startswith("Smith, J. (2020)"))
        self.assertEqual(entries[1], "Jones, K., & Lee, M. (2019a). Another study with a long continued title line.")

    def test_entries_without_year_are_dropped(self) -> None:
        blob = "\n".join(
            [
                "Journal of Applied Things Volume 12 Issue 3 2021",
                "Smith, J. (2020). A study of things. Journal.",
            ]
        )
        self.assertEqual(segment_reference_lines(blob), ["Smith, J. (2020). A study of things. Journal."])

    def test_short_entries_are_dropped(self) -> None:
        self.assertEqual(segment_reference_lines("Smith, J. (2020). Title."), [])

    def test_numbered_entries(self) -> None:
        blob = "1. Smith, J. (2020). A study of things. Journal.\n2. Brown, A. (2018). Another study. Journal."
        entries = segment_reference_lines(blob)
        self.assertEqual(len(entries), 2)
        self.assertTrue(entries[1].startswith("2. Brown"))


class TestEntryParsing(unittest.TestCase):
    def test_multi_author_entry(self) -> None:
        ref = parse_reference_entry("12. Smith, J., & Jones, K. (2020b). Title. Journal.")
        self.assertIsNotNone(ref)
        self.assertEqual(ref.original, "Smith, J., & Jones, K. (2020b). Title. Journal.")
        self.assertEqual(ref.year, "2020b")
        self.assertEqual(ref.all_authors, "Smith, J., & Jones, K")
        self.assertEqual(ref.first_author, "Smith")
        self.assertEqual(ref.normalized, "smith j jones k 2020b")
        self.assertEqual(ref.first_author_normalized, "smith 2020b")

    def test_bracketed_marker(self) -> None:
        ref = parse_reference_entry("[3] Brown, A. (2018). A title. Journal.")
        self.assertEqual(ref.first_author, "Brown")

    def test_organisation_author(self) -> None:
        ref = parse_reference_entry("World Health Organization. (2019). Global report on things.")
        self.assertEqual(ref.all_authors, "World Health Organization")
        self.assertEqual(ref.first_author, "World")

    def test_rejects_entries_without_usable_author_or_year(self) -> None:
        self.assertIsNone(parse_reference_entry("A (2020). Something long enough to pass."))
        self.assertIsNone(parse_reference_entry("Smith, J. 2020. Title without a parenthesised year."))


class TestExtractReferences(unittest.TestCase):
    def test_references_and_footnotes_are_merged_and_deduplicated(self) -> None:
        text = "\n".join(
            [
                "Body (Smith, 2020).",
                "References",
                "Smith, J. (2020). Title of the work. Journal.",
                "Footnotes",
                "Smith, J. (2020). Title of the work. Journal.",
                "Brown, A. (2018). Something else entirely. Press.",
            ]
        )
        refs = extract_references(text)
        self.assertEqual([r.first_author for r in refs], ["Smith", "Brown"])


if __name__ == "__main__":
    unittest.main()
