import unittest
from datetime import date

from dailynews.errors import ConflictError, NotFoundError, ValidationError
from dailynews.settings import DEFAULT_TOPICS
from dailynews.tests.fakes import temp_store

DAY = date(2024, 6, 1)


class TopicStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = temp_store(self)

    def test_seed_default_topics_is_idempotent(self):
        self.assertEqual(self.store.seed_default_topics(DEFAULT_TOPICS), 5)
        self.assertEqual(self.store.seed_default_topics(DEFAULT_TOPICS), 0)
        names = [topic.name for topic in self.store.list_topics()]
        self.assertEqual(names, list(DEFAULT_TOPICS))

    def test_add_topic_rejects_duplicates_and_blank_names(self):
        self.store.add_topic("AI")
        with self.assertRaises(ConflictError):
            self.store.add_topic("AI")
        with self.assertRaises(ValidationError):
            self.store.add_topic("   ")

    def test_update_and_deactivate_topic(self):
        topic = self.store.add_topic("EV")
        updated = self.store.update_topic(topic.id, name="Electric Vehicles", is_active=False)
        self.assertEqual(updated.name, "Electric Vehicles")
        self.assertFalse(updated.is_active)
        self.assertEqual(self.store.get_active_topics(), [])
        with self.assertRaises(NotFoundError):
            self.store.update_topic(9999, is_active=True)

    def test_delete_topic_cascades_to_articles(self):
        topic = self.store.add_topic("Politics")
        self.store.insert_article(DAY, topic.id, "en", "H", "Body", [])
        self.store.delete_topic(topic.id)
        self.assertEqual(self.store.count_articles(), 0)
        with self.assertRaises(NotFoundError):
            self.store.delete_topic(topic.id)

    def test_interests_live_in_their_own_namespace(self):
        self.store.add_topic("AI")
        interest = self.store.add_interest("AI")
        self.assertEqual([i.name for i in self.store.list_interests()], ["AI"])
        self.assertEqual(self.store.get_interest(interest.id).name, "AI")
        with self.assertRaises(ConflictError):
            self.store.add_interest("AI")


class ArticleStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = temp_store(self)
        self.topic = self.store.add_topic("AI")

    def test_natural_key_is_unique(self):
        self.assertFalse(self.store.article_exists(DAY, self.topic.id, "en"))
        article_id = self.store.insert_article(DAY, self.topic.id, "en", "Headline", "Body", ["https://a"])
        self.assertTrue(self.store.article_exists(DAY, self.topic.id, "en"))
        self.assertFalse(self.store.article_exists(DAY, self.topic.id, "zh"))
        with self.assertRaises(ConflictError):
            self.store.insert_article(DAY, self.topic.id, "en", "Other", "Other body", [])
        self.assertEqual(self.store.count_articles(), 1)
        self.assertEqual(self.store.get_article(article_id).headline, "Headline")

    def test_insert_for_unknown_topic_is_a_validation_error(self):
        with self.assertRaises(ValidationError):
            self.store.insert_article(DAY, 4242, "en", "H", "B", [])

    def test_article_round_trip_and_listing(self):
        self.store.insert_article(DAY, self.topic.id, "zh", "标题", "内容", ["https://a", "https://b"])
        self.store.insert_article(date(2024, 6, 2), self.topic.id, "en", "Later", "Body", [])
        articles = self.store.get_articles_by_date(DAY)
        self.assertEqual(len(articles), 1)
        article = articles[0]
        self.assertEqual(article.topic_name, "AI")
        self.assertEqual(article.sources, ["https://a", "https://b"])
        self.assertIsNone(article.voice_file_path)
        self.assertEqual(article.date, DAY)
        self.assertEqual(self.store.list_article_dates(), [date(2024, 6, 2), DAY])
        self.assertEqual(self.store.delete_articles_by_date(DAY), 1)
        self.assertEqual(self.store.list_article_dates(), [date(2024, 6, 2)])

    def test_only_derived_fields_are_writable(self):
        article_id = self.store.insert_article(DAY, self.topic.id, "en", "H", "B", [])
        updated = self.store.set_article_audio_path(article_id, "/api/articles/audio/a.mp3")
        self.assertEqual(updated.voice_file_path, "/api/articles/audio/a.mp3")
        with self.assertRaises(ValidationError):
            self.store.update_derived_field("article", article_id, "headline", "Changed")
        with self.assertRaises(NotFoundError):
            self.store.update_derived_field("article", 9999, "voice_file_path", "x")
        self.assertEqual(self.store.get_article(article_id).headline, "H")


class SocialStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = temp_store(self)
        self.interest = self.store.add_interest("Tech")

    def _insert(self, url="https://example.com/a"):
        return self.store.insert_social_article(
            interest_id=self.interest.id,
            source_url=url,
            title="Title",
            content="Content",
            scraped_at=DAY,
            author="Author",
            publish_date=date(2024, 5, 30),
        )

    def test_source_url_is_unique(self):
        article_id = self._insert()
        self.assertTrue(self.store.social_article_exists("https://example.com/a"))
        with self.assertRaises(ConflictError):
            self._insert()
        stored = self.store.get_social_article_by_url("https://example.com/a")
        self.assertEqual(stored.id, article_id)
        self.assertEqual(stored.interest_name, "Tech")
        self.assertEqual(stored.publish_date, date(2024, 5, 30))

    def test_dates_listing_summary_and_delete(self):
        article_id = self._insert()
        self.assertEqual(self.store.list_social_dates(), [DAY])
        self.assertEqual([a.id for a in self.store.get_social_articles_by_date(DAY)], [article_id])
        self.assertEqual(self.store.set_social_article_summary(article_id, "Sum").summary, "Sum")
        self.store.delete_social_article(article_id)
        self.assertIsNone(self.store.get_social_article(article_id))
        with self.assertRaises(NotFoundError):
            self.store.delete_social_article(article_id)

    def test_deleting_interest_cascades(self):
        self._insert()
        self.store.delete_interest(self.interest.id)
        self.assertEqual(self.store.list_social_dates(), [])


if __name__ == "__main__":
    unittest.main()
