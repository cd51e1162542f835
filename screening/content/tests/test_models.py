import pytest
from model_bakery import baker

from screening.content.models import Catch, Comment, Event, EventNews, Point
from screening.content.registry import get_instance, model_for_content_type, model_for_entity


@pytest.mark.django_db
@pytest.mark.unit
class TestModerationRequests:
    def test_catch_fans_out_description_and_photos(self, user):
        catch = baker.make(Catch, author=user, description="Dourado", photos=["c/1.jpg", "", "c/2.jpg"])

        assert catch.moderation_requests() == [
            ("catch_descriptions", "Dourado", "text"),
            ("catch_photos", "c/1.jpg", "image"),
            ("catch_photos", "c/2.jpg", "image"),
        ]

    def test_catch_without_description_only_sends_photos(self, user):
        catch = baker.make(Catch, author=user, description="", photos=["c/1.jpg"])

        assert catch.moderation_requests() == [("catch_photos", "c/1.jpg", "image")]

    def test_comment_content_type_follows_parent(self, user):
        point = baker.make(Point, author=user)
        catch = baker.make(Catch, author=user)

        on_point = baker.make(Comment, author=user, point=point, body="Lugar ótimo")
        on_catch = baker.make(Comment, author=user, catch=catch, body="Que peixe!")

        assert on_point.moderation_requests() == [("point_comments", "Lugar ótimo", "text")]
        assert on_catch.moderation_requests() == [("catch_comments", "Que peixe!", "text")]

    def test_event_and_news_send_title_with_text(self, user):
        event = baker.make(Event, author=user, title="Torneio", description="Sábado no rio")
        news = baker.make(EventNews, author=user, event=event, title="Resultado", content="Vencedor: João")

        assert event.moderation_requests() == [("event_descriptions", "Torneio\nSábado no rio", "text")]
        assert news.moderation_requests() == [("event_news", "Resultado\nVencedor: João", "text")]

    def test_entity_names(self):
        assert [model.entity_name() for model in (Catch, Comment, Point, Event, EventNews)] == [
            "catch",
            "comment",
            "point",
            "event",
            "news",
        ]


@pytest.mark.django_db
@pytest.mark.unit
class TestContentRegistry:
    @pytest.mark.parametrize(
        "content_type,model",
        [
            ("catch_descriptions", Catch),
            ("catch_photos", Catch),
            ("catch_comments", Comment),
            ("point_comments", Comment),
            ("point_descriptions", Point),
            ("point_photos", Point),
            ("event_descriptions", Event),
            ("event_news", EventNews),
            ("user_bio", None),
        ],
    )
    def test_model_for_content_type(self, content_type, model):
        assert model_for_content_type(content_type) is model

    def test_model_for_entity(self):
        assert model_for_entity("news") is EventNews
        assert model_for_entity("video") is None

    def test_get_instance(self, user):
        point = baker.make(Point, author=user)

        assert get_instance(Point, str(point.pk)) == point
        assert get_instance(Point, "not-a-uuid") is None
        assert get_instance(Point, "00000000-0000-0000-0000-000000000000") is None
