import unittest

from citecheck.citations import citation_key
from citecheck.matcher import match_citations, score_multi_author, score_pair
from citecheck.models import Citation, Reference
from citecheck.textnorm import normalize


def cite(authors: str, year: str) -> Citation:
    return Citation(
        original=f"({authors}, {year})",
        authors=authors,
        year=year,
        normalized=citation_key(authors, year),
        type="parenthetical",
    )


def ref(first_author: str, all_authors: str, year: str) -> Reference:
    return Reference(
        original=f"{all_authors}. ({year}). Some title. Some journal.",
        first_author=first_author,
        all_authors=all_authors,
        year=year,
        normalized=normalize(all_authors + " " + year),
        first_author_normalized=normalize(first_author + " " + year),
    )


class TestScorePair(unittest.TestCase):
    def test_year_gate(self) -> None:
        self.assertEqual(score_pair(cite("Smith", "2019"), ref("Smith", "Smith, J", "2020")), (0, "none"))

    def test_exact_surname(self) -> None:
        self.assertEqual(score_pair(cite("Smith", "2020"), ref("Smith", "Smith, J", "2020")), (100, "full"))

    def test_year_suffix_is_ignored_by_the_gate(self) -> None:
        self.assertEqual(score_pair(cite("Smith", "2020a"), ref("Smith", "Smith, J", "2020")), (100, "full"))

    def test_substring_surname(self) -> None:
        self.assertEqual(score_pair(cite("Smithson", "2020"), ref("Smith", "Smith, J", "2020")), (90, "partial"))

    def test_spelling_error(self) -> None:
        self.assertEqual(score_pair(cite("Smyth", "2020"), ref("Smith", "Smith, J", "2020")), (72, "spelling_error"))

    def test_unrelated_surname(self) -> None:
        self.assertEqual(score_pair(cite("Brown", "2020"), ref("Smith", "Smith, J", "2020")), (0, "none"))

    def test_single_path_wins_over_weaker_multi_path(self) -> None:
        reference = ref("Smith", "Smith, J., & Jones, K", "2020")
        self.assertEqual(score_multi_author(cite("Smith & Jones", "2020"), reference), (95, "full"))
        self.assertEqual(score_pair(cite("Smith & Jones", "2020"), reference), (100, "full"))

    def test_multi_path_label_follows_winning_score(self) -> None:
        reference = ref("Smith", "Smith, J., & Jones, K", "2020")
        self.assertEqual(score_pair(cite("Smith & Jonnes", "2020"), reference), (93.75, "spelling_error"))

    def test_multi_path_rejects_poor_overlap(self) -> None:
        reference = ref("Smith", "Smith, J., & Jones, K", "2020")
        self.assertIsNone(score_multi_author(cite("Brown & Green", "2020"), reference))


class TestMatchCitations(unittest.TestCase):
    def test_buckets(self) -> None:
        refs = [
            ref("Smith", "Smith, J", "2020"),
            ref("Adams", "Adams, B., Baker, C., & Clark, D", "2017"),
            ref("Jonson", "Jonson, K", "2019"),
            ref("Unused", "Unused, U", "2001"),
        ]
        cites = [
            cite("Smith", "2020"),
            cite("Adams, Baker, Clark & Davis", "2017"),
            cite("Jonsen", "2019"),
            cite("Lee", "2021"),
        ]
        out = match_citations(cites, refs)

        self.assertEqual([m.citation.authors for m in out.full_matches], ["Smith"])
        self.assertEqual(len(out.partial_matches), 1)
        self.assertAlmostEqual(out.partial_matches[0].confidence, 88.75)
        self.assertEqual(out.partial_matches[0].match_type, "partial")
        self.assertEqual([(m.citation.authors, m.confidence) for m in out.probable_spelling_errors], [("Jonsen", 75)])
        self.assertEqual([u.citation.authors for u in out.unmatched], ["Lee"])
        self.assertEqual([u.reference.first_author for u in out.unused], ["Unused"])

    def test_first_reference_wins_ties(self) -> None:
        refs = [ref("Smith", "Smith, J", "2020"), ref("Smith", "Smith, A", "2020")]
        out = match_citations([cite("Smith", "2020")], refs)
        self.assertIs(out.full_matches[0].reference, refs[0])
        self.assertEqual([u.reference.all_authors for u in out.unused], ["Smith, A"])

    def test_every_citation_lands_in_exactly_one_bucket(self) -> None:
        refs = [ref("Smith", "Smith, J", "2020"), ref("Jonson", "Jonson, K", "2019")]
        cites = [cite("Smith", "2020"), cite("Smith", "2020b"), cite("Jonsen", "2019"), cite("Nobody", "1999")]
        out = match_citations(cites, refs)
        total = len(out.full_matches) + len(out.partial_matches) + len(out.probable_spelling_errors) + len(out.unmatched)
        self.assertEqual(total, len(cites))


if __name__ == "__main__":
    unittest.main()
