import tempfile
import unittest
from datetime import date
from pathlib import Path

from app import create_app
from dailynews.errors import ExtractionExhausted, ProviderError
from dailynews.services import Services
from dailynews.settings import Settings
from dailynews.social import SocialService
from dailynews.speech import AudioStorage, SpeechGate
from dailynews.tests.fakes import FakeChain, FakeGenerator, FakeSpeech, FakeSummarizer, temp_store

DAY = date(2024, 6, 1)


class FailingSpeech(FakeSpeech):
    def synthesize(self, text):
        raise ProviderError("ElevenLabs rate limited the request", provider="elevenlabs", status=429)


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.store = temp_store(self)
        self.settings = Settings(database_url="sqlite://", audio_dir=Path(tmpdir.name), gemini_api_key="g-key")
        self.audio = AudioStorage(self.settings.audio_dir)
        self.speech = FakeSpeech()
        self.chain = FakeChain()
        self.generator = FakeGenerator()
        self.app = create_app(self._services())
        self.client = self.app.test_client()

    def _services(self, speech=None, chain=None):
        chain = chain or self.chain
        return Services(
            settings=self.settings,
            store=self.store,
            generator=self.generator,
            search=None,
            speech=SpeechGate(self.store, speech or self.speech, self.audio),
            audio=self.audio,
            chain=chain,
            social=SocialService(self.store, chain, summarizer=FakeSummarizer()),
        )

    def _rebuild(self, **kwargs):
        self.client = create_app(self._services(**kwargs)).test_client()


class HealthTests(ApiTestCase):
    def test_health(self):
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["status"], "ok")

    def test_system_health_reports_flags_only(self):
        body = self.client.get("/api/system-health").get_json()
        self.assertTrue(body["providers"]["gemini"])
        self.assertFalse(body["providers"]["elevenlabs"])
        self.assertEqual(body["languages"], ["en", "zh"])
        self.assertNotIn("g-key", str(body))

    def test_unknown_route_is_json_404(self):
        resp = self.client.get("/api/nothing-here")
        self.assertEqual(resp.status_code, 404)
        self.assertIn("error", resp.get_json())


class TopicRoutesTests(ApiTestCase):
    def test_topic_crud(self):
        created = self.client.post("/api/topics", json={"name": " AI "})
        self.assertEqual(created.status_code, 201)
        topic = created.get_json()
        self.assertEqual(topic["name"], "AI")
        self.assertTrue(topic["is_active"])

        self.assertEqual(self.client.post("/api/topics", json={"name": "AI"}).status_code, 409)
        self.assertEqual(self.client.post("/api/topics", json={}).status_code, 400)

        updated = self.client.put(f"/api/topics/{topic['id']}", json={"is_active": False})
        self.assertEqual(updated.status_code, 200)
        self.assertFalse(updated.get_json()["is_active"])
        self.assertEqual(self.client.put(f"/api/topics/{topic['id']}", json={}).status_code, 400)
        self.assertEqual(self.client.put("/api/topics/999", json={"name": "X"}).status_code, 404)

        self.assertEqual(self.client.delete(f"/api/topics/{topic['id']}").get_json(), {"success": True})
        self.assertEqual(self.client.get("/api/topics").get_json(), [])
        self.assertEqual(self.client.delete(f"/api/topics/{topic['id']}").status_code, 404)

    def test_interest_crud(self):
        created = self.client.post("/api/social/interests", json={"name": "Tech"})
        self.assertEqual(created.status_code, 201)
        interest_id = created.get_json()["id"]
        renamed = self.client.put(f"/api/social/interests/{interest_id}", json={"name": "Technology"})
        self.assertEqual(renamed.get_json()["name"], "Technology")
        self.assertEqual([i["name"] for i in self.client.get("/api/social/interests").get_json()], ["Technology"])
        self.assertEqual(self.client.delete(f"/api/social/interests/{interest_id}").status_code, 200)


class ArticleRoutesTests(ApiTestCase):
    def test_generate_without_topics_is_400(self):
        resp = self.client.post("/api/generate")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "No active topics found")

    def test_generate_then_browse(self):
        self.store.add_topic("AI")
        body = self.client.post("/api/generate").get_json()
        self.assertTrue(body["success"])
        self.assertEqual(body["generated"], 2)
        day = body["date"]

        self.assertEqual(self.client.get("/api/articles/dates").get_json(), [day])
        articles = self.client.get(f"/api/articles/{day}").get_json()
        self.assertEqual({a["language"] for a in articles}, {"en", "zh"})
        detail = self.client.get(f"/api/articles/detail/{articles[0]['id']}").get_json()
        self.assertEqual(detail["topic_name"], "AI")

    def test_bad_date_and_missing_article(self):
        self.assertEqual(self.client.get("/api/articles/not-a-date").status_code, 400)
        self.assertEqual(self.client.get("/api/articles/detail/42").status_code, 404)

    def test_tts_then_download_audio(self):
        topic = self.store.add_topic("AI")
        article_id = self.store.insert_article(DAY, topic.id, "en", "H", "Body", [])

        first = self.client.post(f"/api/articles/tts/{article_id}")
        self.assertEqual(first.status_code, 200)
        payload = first.get_json()
        self.assertFalse(payload["cached"])
        self.assertTrue(payload["audioUrl"].startswith("/api/articles/audio/article_"))

        second = self.client.post(f"/api/articles/tts/{article_id}").get_json()
        self.assertEqual(second, {"audioUrl": payload["audioUrl"], "cached": True})

        audio = self.client.get(payload["audioUrl"])
        self.assertEqual(audio.status_code, 200)
        self.assertEqual(audio.mimetype, "audio/mpeg")
        self.assertEqual(audio.data, self.speech.payload)
        audio.close()

        self.assertEqual(self.client.post("/api/articles/tts/999").status_code, 404)
        self.assertEqual(self.client.get("/api/articles/audio/missing.mp3").status_code, 404)

    def test_provider_failure_is_502(self):
        topic = self.store.add_topic("AI")
        article_id = self.store.insert_article(DAY, topic.id, "en", "H", "Body", [])
        self._rebuild(speech=FailingSpeech())
        resp = self.client.post(f"/api/articles/tts/{article_id}")
        self.assertEqual(resp.status_code, 502)
        self.assertTrue(resp.get_json()["retryable"])
        self.assertIsNone(self.store.get_article(article_id).voice_file_path)


class SocialRoutesTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.interest = self.store.add_interest("Tech")

    def test_submit_duplicate_and_summary(self):
        url = "https://example.com/story"
        first = self.client.post("/api/social/submit", json={"url": url, "interestId": self.interest.id})
        self.assertEqual(first.status_code, 201)
        article_id = first.get_json()["id"]
        self.assertFalse(first.get_json()["duplicate"])

        again = self.client.post("/api/social/submit", json={"url": url, "interest_id": self.interest.id})
        self.assertEqual(again.status_code, 200)
        self.assertTrue(again.get_json()["duplicate"])
        self.assertEqual(again.get_json()["id"], article_id)

        day = self.client.get("/api/social/dates").get_json()[0]
        listed = self.client.get(f"/api/social/articles/{day}").get_json()
        self.assertEqual([a["id"] for a in listed], [article_id])

        summary = self.client.post(f"/api/social/article/{article_id}/summary").get_json()
        self.assertEqual(summary, {"summary": "A short summary.", "cached": False})
        cached = self.client.post(f"/api/social/article/{article_id}/summary").get_json()
        self.assertTrue(cached["cached"])
        self.assertEqual(self.client.get(f"/api/social/article/{article_id}").get_json()["summary"], "A short summary.")

        self.assertEqual(self.client.delete(f"/api/social/article/{article_id}").status_code, 200)
        self.assertEqual(self.client.get(f"/api/social/article/{article_id}").status_code, 404)
        self.assertEqual(self.client.post(f"/api/social/article/{article_id}/summary").status_code, 404)

    def test_submit_validation(self):
        missing_url = self.client.post("/api/social/submit", json={"interestId": self.interest.id})
        self.assertEqual(missing_url.status_code, 400)
        self.assertEqual(missing_url.get_json()["error"], "URL is required")
        bad_url = self.client.post("/api/social/submit", json={"url": "not a url", "interestId": self.interest.id})
        self.assertEqual(bad_url.get_json()["error"], "Invalid URL format")
        no_interest = self.client.post("/api/social/submit", json={"url": "https://example.com/a"})
        self.assertEqual(no_interest.status_code, 400)
        self.assertEqual(self.chain.urls, [])

    def test_exhausted_extraction_is_422_with_attempts(self):
        url = "https://example.com/blocked"
        error = ExtractionExhausted(
            url,
            [("direct_html", "Access denied (403)"), ("reader_proxy", "timed out")],
            RuntimeError("Access denied (403)"),
        )
        self._rebuild(chain=FakeChain(error=error))
        resp = self.client.post("/api/social/submit", json={"url": url, "interestId": self.interest.id})
        self.assertEqual(resp.status_code, 422)
        body = resp.get_json()
        self.assertEqual(body["error"], "Failed to process URL")
        self.assertEqual([a["strategy"] for a in body["attempts"]], ["direct_html", "reader_proxy"])
        self.assertFalse(self.store.social_article_exists(url))


if __name__ == "__main__":
    unittest.main()
