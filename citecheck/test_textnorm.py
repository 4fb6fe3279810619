import unittest

from citecheck.textnorm import (
    edit_distance,
    extract_first_author,
    extract_surname,
    norm_space,
    normalize,
    similarity,
    strip_year_suffix,
)


class TestNormalize(unittest.TestCase):
    def test_punctuation_and_case_do_not_matter(self) -> None:
        self.assertEqual(normalize("Smith & Jones (2020)"), "smith jones 2020")
        self.assertEqual(normalize("Smith & Jones (2020)"), normalize("smith jones 2020"))
        self.assertEqual(normalize("  SMITH,   Jones.  2020 "), "smith jones 2020")

    def test_drops_et_al_and_signal_words(self) -> None:
        self.assertEqual(normalize("Kofi et al., 2020"), "kofi 2020")
        self.assertEqual(normalize("(see Smith, 2020)"), "smith 2020")
        self.assertEqual(normalize("e.g., Smith 2020"), "smith 2020")
        self.assertEqual(normalize("cf. Smith 2020"), "smith 2020")

    def test_hyphens_become_spaces(self) -> None:
        self.assertEqual(normalize("Ancoli-Israel 2019"), "ancoli israel 2019")

    def test_idempotent(self) -> None:
        samples = [
            "Smith, J. & Jones, K. (2020)",
            "(see Kofi et al., 2020a)",
            "et et al al 2020",
            "Ancoli--Israel  -  2019",
            "",
            "e.g. see cf.",
        ]
        for s in samples:
            once = normalize(s)
            self.assertEqual(normalize(once), once, s)

    def test_norm_space_handles_nbsp(self) -> None:
        self.assertEqual(norm_space("a\u00a0 b\n c"), "a b c")


class TestAuthorHelpers(unittest.TestCase):
    def test_extract_first_author(self) -> None:
        self.assertEqual(extract_first_author("Smith, Jones & Lee"), "Smith")
        self.assertEqual(extract_first_author("Smith & Jones"), "Smith")
        self.assertEqual(extract_first_author("Kofi et al."), "Kofi")

    def test_extract_surname_skips_initials(self) -> None:
        self.assertEqual(extract_surname("Smith et al."), "Smith")
        self.assertEqual(extract_surname("J. K. Rowling"), "Rowling")
        self.assertEqual(extract_surname("van der Berg"), "Berg")

    def test_extract_surname_falls_back_to_input(self) -> None:
        self.assertEqual(extract_surname("J."), "J.")

    def test_strip_year_suffix(self) -> None:
        self.assertEqual(strip_year_suffix("2020a"), "2020")
        self.assertEqual(strip_year_suffix("2020"), "2020")


class TestSimilarity(unittest.TestCase):
    def test_edit_distance(self) -> None:
        self.assertEqual(edit_distance("kitten", "sitting"), 3)
        self.assertEqual(edit_distance("smith", "smith"), 0)

    def test_similarity_is_symmetric(self) -> None:
        pairs = [("smith", "smyth"), ("jonson", "jonsen"), ("a", "abcdef"), ("", "xyz")]
        for a, b in pairs:
            self.assertEqual(similarity(a, b), similarity(b, a))

    def test_similarity_values(self) -> None:
        self.assertAlmostEqual(similarity("smith", "smyth"), 0.8)
        self.assertEqual(similarity("", ""), 1.0)
        self.assertEqual(similarity("abc", ""), 0.0)


if __name__ == "__main__":
    unittest.main()
