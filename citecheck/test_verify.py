import unittest
from unittest.mock import MagicMock, patch

from citecheck.config import Settings
from citecheck.verify import (
    ERROR,
    NOT_FOUND,
    PARTIALLY_VERIFIED,
    VERIFIED,
    build_biblio_query,
    classify_record,
    crossref_lookup,
    default_lookups,
    verify_reference,
)

REF = "Smith, J. (2020). Neural network pruning methods. Journal of Machine Learning."


class TestClassifyRecord(unittest.TestCase):
    def test_verified(self) -> None:
        record = {"title": "Neural network pruning methods", "year": "2020", "doi": "10.1/abc", "url": ""}
        result = classify_record("Crossref", REF, record)
        self.assertEqual(result.status, VERIFIED)
        self.assertIn("DOI: 10.1/abc", result.details)

    def test_partially_verified(self) -> None:
        result = classify_record("OpenAlex", REF, {"title": "Pruning orchards", "year": "1999"})
        self.assertEqual(result.status, PARTIALLY_VERIFIED)

    def test_not_found(self) -> None:
        self.assertEqual(classify_record("PubMed", REF, {"title": "Completely unrelated"}).status, NOT_FOUND)
        self.assertEqual(classify_record("PubMed", REF, None).details, "Reference not found in PubMed.")


class TestVerifyReference(unittest.TestCase):
    def test_all_sources_settle_in_order(self) -> None:
        def broken(query):
            raise RuntimeError("timeout")

        lookups = {
            "Crossref": lambda q: {"title": "Neural network pruning methods"},
            "OpenAlex": broken,
            "PubMed": lambda q: None,
        }
        results = verify_reference(REF, settings=Settings(), lookups=lookups)
        self.assertEqual([r.source for r in results], ["Crossref", "OpenAlex", "PubMed"])
        self.assertEqual([r.status for r in results], [VERIFIED, ERROR, NOT_FOUND])
        self.assertEqual(results[1].details, "OpenAlex lookup failed: timeout")

    def test_lookups_receive_cleaned_query(self) -> None:
        seen = []
        verify_reference("[4]  Smith,   J. (2020). Title.", lookups={"Crossref": lambda q: seen.append(q)})
        self.assertEqual(seen, ["Smith, J. (2020). Title."])

    def test_no_sources(self) -> None:
        self.assertEqual(verify_reference(REF, lookups={}), [])

    def test_default_lookups_follow_settings(self) -> None:
        lookups = default_lookups(Settings(verify_sources=("openalex", "pubmed")))
        self.assertEqual(list(lookups), ["OpenAlex", "PubMed"])


class TestQueries(unittest.TestCase):
    def test_build_biblio_query(self) -> None:
        self.assertEqual(build_biblio_query("12. Smith, J.\n(2020). Title."), "Smith, J. (2020). Title.")
        self.assertEqual(len(build_biblio_query("x" * 500)), 280)

    def test_crossref_lookup_parses_top_item(self) -> None:
        response = MagicMock()
        response.json.return_value = {
            "message": {
                "items": [
                    {
                        "title": ["Neural network pruning methods"],
                        "issued": {"date-parts": [[2020, 5]]},
                        "DOI": "10.1/abc",
                        "URL": "https://doi.org/10.1/abc",
                    }
                ]
            }
        }
        with patch("citecheck.verify.requests.get", return_value=response) as get:
            record = crossref_lookup("query", mailto="me@example.org")
        self.assertEqual(
            record,
            {"title": "Neural network pruning methods", "year": "2020", "doi": "10.1/abc", "url": "https://doi.org/10.1/abc"},
        )
        self.assertEqual(get.call_args.kwargs["params"]["mailto"], "me@example.org")

    def test_crossref_lookup_without_hits(self) -> None:
        response = MagicMock()
        response.json.return_value = {"message": {"items": []}}
        with patch("citecheck.verify.requests.get", return_value=response):
            self.assertIsNone(crossref_lookup("query"))


if __name__ == "__main__":
    unittest.main()
