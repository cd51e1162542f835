import pytest
from model_bakery import baker

from screening.content.models import Catch, Point
from screening.moderation import tasks
from screening.moderation.services.dispatcher import ModerationDispatcher


@pytest.fixture
def delayed(monkeypatch):
    calls = []
    monkeypatch.setattr(tasks.process_moderation_request, "delay", lambda *args: calls.append(args))
    return calls


@pytest.mark.django_db
@pytest.mark.integration
class TestModerationDispatcher:
    def test_enqueues_after_commit(self, delayed, user, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            ModerationDispatcher.request_moderation("catch_comments", "abc", "oi pessoal", "text", requested_by=user)

        assert len(callbacks) == 1
        assert delayed == [("catch_comments", "abc", "oi pessoal", "text", str(user.pk))]

    def test_nothing_enqueued_before_commit(self, delayed, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            ModerationDispatcher.request_moderation("catch_photos", "abc", "catches/1.jpg", "image")

        assert len(callbacks) == 1
        assert delayed == []

    def test_unknown_format_is_rejected(self, delayed):
        with pytest.raises(ValueError):
            ModerationDispatcher.request_moderation("catch_comments", "abc", "oi", "video")

    def test_entity_fans_out_per_field(self, delayed, user, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            point = baker.make(Point, author=user, description="Remanso bom", photos=["p/1.jpg", "p/2.jpg"])

        assert sorted(call[0] for call in delayed) == ["point_descriptions", "point_photos", "point_photos"]
        assert {call[1] for call in delayed} == {str(point.pk)}

    def test_edit_requeues_only_changed_items(self, delayed, user, django_capture_on_commit_callbacks):
        catch = baker.make(Catch, author=user, description="Pacu", photos=["c/1.jpg"])

        with django_capture_on_commit_callbacks(execute=True):
            catch.description = "Pacu de 3kg"
            catch.save()

        assert delayed == [("catch_descriptions", str(catch.pk), "Pacu de 3kg", "text", None)]

    def test_saving_unmoderated_fields_does_not_requeue(self, delayed, user, django_capture_on_commit_callbacks):
        catch = baker.make(Catch, author=user, description="Pacu")

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            catch.species = "Pacu"
            catch.save()

        assert callbacks == []
