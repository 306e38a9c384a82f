import unittest
from datetime import date
from types import SimpleNamespace

from crawler.pipelines.dedupe import dedupe_by_key, dedupe_uris
from dailynews.adapters.base import language_instruction, parse_generated_text
from dailynews.adapters.claude import format_results
from dailynews.adapters.gemini import grounding_uris, parse_extraction_json
from dailynews.errors import ExtractionError
from dailynews.models import Language, SearchResult


class HeadlineParsingTests(unittest.TestCase):
    def test_headline_line_is_extracted_and_removed(self):
        text = "Headline: Markets rally on rate hopes\n\nStocks rose on Monday.\nBonds were flat."
        article = parse_generated_text("Stock Market", text)
        self.assertEqual(article.headline, "Markets rally on rate hopes")
        self.assertEqual(article.content, "Stocks rose on Monday.\nBonds were flat.")
        self.assertNotIn("Headline", article.content)

    def test_marker_is_case_insensitive_and_tolerates_markdown(self):
        article = parse_generated_text("AI", "## **HEADLINE:** New chips unveiled\nBody text.")
        self.assertEqual(article.headline, "New chips unveiled")
        self.assertEqual(article.content, "Body text.")

    def test_marker_after_preamble(self):
        article = parse_generated_text("EV", "Sure, here it is.\nHeadline: EV sales climb\nBody.")
        self.assertEqual(article.headline, "EV sales climb")
        self.assertEqual(article.content, "Sure, here it is.\n\nBody.".replace("\n\n", "\n"))

    def test_missing_marker_falls_back_to_topic(self):
        article = parse_generated_text("Politics", "  Just an article body.  ")
        self.assertEqual(article.headline, "Politics - Daily Update")
        self.assertEqual(article.content, "Just an article body.")

    def test_chinese_headline(self):
        article = parse_generated_text("AI", "Headline: 人工智能的新进展\n\n正文内容。")
        self.assertEqual(article.headline, "人工智能的新进展")
        self.assertEqual(article.content, "正文内容。")

    def test_sources_are_deduplicated_in_order(self):
        article = parse_generated_text("AI", "Headline: X\nBody", ["https://b", "https://a", "https://b", "", None])
        self.assertEqual(article.sources, ["https://b", "https://a"])

    def test_language_instruction(self):
        self.assertIn("简体中文", language_instruction(Language.ZH))
        self.assertIn("English", language_instruction(Language.EN))


class DedupeTests(unittest.TestCase):
    def test_dedupe_by_key_keeps_first(self):
        items = [("a", 1), ("b", 2), ("a", 3)]
        self.assertEqual(dedupe_by_key(items, key_fn=lambda item: item[0]), [("a", 1), ("b", 2)])

    def test_dedupe_uris_strips_blanks(self):
        self.assertEqual(dedupe_uris([" https://x ", "https://x", "  "]), ["https://x"])


class ProviderPayloadTests(unittest.TestCase):
    def test_grounding_uris(self):
        chunk = lambda uri: SimpleNamespace(web=SimpleNamespace(uri=uri))  # noqa: E731
        resp = SimpleNamespace(
            candidates=[
                SimpleNamespace(
                    grounding_metadata=SimpleNamespace(
                        grounding_chunks=[chunk("https://a"), SimpleNamespace(web=None), chunk("https://b")]
                    )
                )
            ]
        )
        self.assertEqual(grounding_uris(resp), ["https://a", "https://b"])
        self.assertEqual(grounding_uris(SimpleNamespace(candidates=None)), [])
        self.assertEqual(grounding_uris(SimpleNamespace(candidates=[SimpleNamespace(grounding_metadata=None)])), [])

    def test_extraction_json_with_code_fences(self):
        text = '```json\n{"title": "T", "content": "Body text", "author": null, "publishDate": "2024-01-05"}\n```'
        page = parse_extraction_json(text)
        self.assertEqual(page.title, "T")
        self.assertEqual(page.body, "Body text")
        self.assertIsNone(page.author)
        self.assertEqual(page.publish_date, date(2024, 1, 5))

    def test_extraction_json_requires_title_and_content(self):
        with self.assertRaises(ExtractionError):
            parse_extraction_json('{"title": "", "content": "x"}')
        with self.assertRaises(ExtractionError):
            parse_extraction_json("not json at all")

    def test_format_results_lists_sources(self):
        text = format_results([SearchResult(title="T1", snippet="S1", uri="https://one")])
        self.assertIn("1. T1", text)
        self.assertIn("Source: https://one", text)


if __name__ == "__main__":
    unittest.main()
