import pytest
from model_bakery import baker

from screening.content.models import Catch, Comment
from screening.moderation.domain.exceptions import StaleModerationUpdate
from screening.moderation.domain.results import ADMIN_REJECTION, ModerationResult
from screening.moderation.models import ModerationLog, ModerationStatus
from screening.moderation.services.state_machine import CONTENT_EDITED_REASON, ModerationStateMachine


@pytest.fixture
def comment(user):
    return baker.make(Comment, author=user, catch=baker.make(Catch, author=user), body="Belo tucunaré!")


@pytest.mark.unit
class TestStatusMapping:
    @pytest.mark.parametrize(
        "result,expected",
        [
            (ModerationResult(True, 0.95, "ok"), ModerationStatus.APPROVED),
            (ModerationResult(True, 0.85, "ok"), ModerationStatus.PENDING_REVIEW),
            (ModerationResult(False, 0.8, "spam"), ModerationStatus.REJECTED),
            (ModerationResult(False, 0.7, "spam"), ModerationStatus.PENDING_REVIEW),
            (ModerationResult.pending_review("failed"), ModerationStatus.PENDING_REVIEW),
            (ModerationResult(True, 1.0, "x", {"pending_review"}), ModerationStatus.PENDING_REVIEW),
        ],
        ids=["approve", "low_approve", "reject", "low_reject", "fallback", "review_tag_wins"],
    )
    def test_status_for(self, result, expected):
        assert ModerationStateMachine().status_for(result) == expected


@pytest.mark.django_db
@pytest.mark.integration
class TestModerationStateMachine:
    def test_new_content_starts_pending(self, comment):
        assert comment.moderation_status == ModerationStatus.PENDING
        assert comment.moderation_version == 0
        assert not Comment.objects.publicly_visible().filter(pk=comment.pk).exists()

    def test_automated_verdict_is_applied(self, comment):
        result = ModerationResult.reject("spam", categories={"spam"}, confidence=0.95)

        status = ModerationStateMachine().apply_verdict(
            comment, result, content_type="catch_comments", content=comment.body, provider="chatgpt"
        )

        assert status == ModerationStatus.REJECTED
        assert comment.moderation_status == ModerationStatus.REJECTED
        assert comment.moderation_version == 1
        assert comment.moderated_at is not None
        assert comment.moderated_by is None
        assert comment.verdict == result

        log = ModerationLog.objects.get(object_id=str(comment.pk))
        assert log.entity == "comment"
        assert log.content_type == "catch_comments"
        assert log.provider == "chatgpt"
        assert log.source == ModerationLog.Source.PROVIDER
        assert log.categories == ["spam"]

    def test_admin_overrides_automated_rejection(self, comment, admin_user):
        machine = ModerationStateMachine()
        machine.apply_verdict(
            comment,
            ModerationResult(False, 0.95, "spam", {"spam"}),
            content_type="catch_comments",
            content=comment.body,
            provider="local",
        )

        machine.approve(comment, admin_user)

        comment.refresh_from_db()
        assert comment.moderation_status == ModerationStatus.APPROVED
        assert comment.moderated_by == admin_user
        assert comment.verdict.confidence == 1.0
        assert comment.verdict.reason == "Approved by admin"
        assert comment.moderation_version == 2
        assert Comment.objects.publicly_visible().filter(pk=comment.pk).exists()

    def test_admin_reject_records_reason_and_tag(self, comment, admin_user):
        ModerationStateMachine().reject(comment, admin_user, "Propaganda")

        comment.refresh_from_db()
        assert comment.moderation_status == ModerationStatus.REJECTED
        assert comment.verdict.reason == "Propaganda"
        assert ADMIN_REJECTION in comment.verdict.categories

        log = ModerationLog.objects.get(object_id=str(comment.pk))
        assert log.source == ModerationLog.Source.ADMIN
        assert log.performed_by == admin_user

    def test_admin_reject_default_reason(self, comment, admin_user):
        ModerationStateMachine().reject(comment, admin_user)

        comment.refresh_from_db()
        assert comment.verdict.reason == "Rejected by admin"

    def test_automated_verdict_does_not_override_admin(self, comment, admin_user):
        machine = ModerationStateMachine()
        machine.approve(comment, admin_user)

        with pytest.raises(StaleModerationUpdate):
            machine.apply_verdict(
                comment,
                ModerationResult(False, 0.99, "spam", {"spam"}),
                content_type="catch_comments",
                content=comment.body,
                provider="chatgpt",
            )

        comment.refresh_from_db()
        assert comment.moderation_status == ModerationStatus.APPROVED
        assert comment.moderated_by == admin_user
        assert ModerationLog.objects.filter(object_id=str(comment.pk)).count() == 1

    def test_visible_to_author_in_any_status(self, comment, user, admin_user):
        ModerationStateMachine().reject(comment, admin_user)

        assert Comment.objects.visible_to(user).filter(pk=comment.pk).exists()
        assert not Comment.objects.visible_to(admin_user).filter(pk=comment.pk).exists()

    def test_verdict_for_edited_text_is_discarded(self, comment):
        with pytest.raises(StaleModerationUpdate):
            ModerationStateMachine().apply_verdict(
                comment,
                ModerationResult(True, 0.99, "ok"),
                content_type="catch_comments",
                content="texto que já foi editado",
                provider="local",
            )

        comment.refresh_from_db()
        assert comment.moderation_status == ModerationStatus.PENDING
        assert not ModerationLog.objects.filter(object_id=str(comment.pk)).exists()

    def test_edit_reopens_approved_content(self, comment):
        ModerationStateMachine().apply_verdict(
            comment,
            ModerationResult(True, 0.95, "ok"),
            content_type="catch_comments",
            content=comment.body,
            provider="local",
        )

        comment.body = "compre pills baratas aqui"
        comment.save()

        comment.refresh_from_db()
        assert comment.moderation_status == ModerationStatus.PENDING
        assert comment.moderation_version == 2
        assert not Comment.objects.publicly_visible().filter(pk=comment.pk).exists()
        log = ModerationLog.objects.get(object_id=str(comment.pk), source=ModerationLog.Source.SYSTEM)
        assert log.reason == CONTENT_EDITED_REASON

    def test_edit_clears_admin_decision(self, comment, admin_user):
        machine = ModerationStateMachine()
        machine.reject(comment, admin_user)

        comment.body = "Belo tucunaré, parabéns"
        comment.save()

        comment.refresh_from_db()
        assert comment.moderated_by is None
        assert comment.moderation_status == ModerationStatus.PENDING

        status = machine.apply_verdict(
            comment,
            ModerationResult(True, 0.95, "ok"),
            content_type="catch_comments",
            content=comment.body,
            provider="local",
        )
        assert status == ModerationStatus.APPROVED

    def test_full_save_keeps_moderation_state(self, comment):
        stale_copy = Comment.objects.get(pk=comment.pk)
        ModerationStateMachine().apply_verdict(
            comment,
            ModerationResult(False, 0.95, "spam", {"spam"}),
            content_type="catch_comments",
            content=comment.body,
            provider="local",
        )

        stale_copy.save()

        comment.refresh_from_db()
        assert comment.moderation_status == ModerationStatus.REJECTED
        assert comment.verdict.reason == "spam"


@pytest.fixture
def catch(user):
    return baker.make(Catch, author=user, description="Tucunaré de 4kg", photos=["catches/a.jpg"])


def describe(machine, catch, result):
    return machine.apply_verdict(
        catch, result, content_type="catch_descriptions", content=catch.description, provider="local"
    )


def photograph(machine, catch, result):
    return machine.apply_verdict(
        catch, result, content_type="catch_photos", content="catches/a.jpg", content_format="image", provider="local"
    )


@pytest.mark.django_db
@pytest.mark.integration
class TestEntityWithSeveralItems:
    def test_approved_photo_does_not_undo_rejected_description(self, catch):
        machine = ModerationStateMachine()
        describe(machine, catch, ModerationResult(False, 0.95, "spam", {"spam"}))

        status = photograph(machine, catch, ModerationResult(True, 0.95, "ok"))

        catch.refresh_from_db()
        assert status == ModerationStatus.REJECTED
        assert catch.moderation_status == ModerationStatus.REJECTED
        assert catch.verdict.reason == "spam"
        assert not Catch.objects.publicly_visible().filter(pk=catch.pk).exists()
        assert ModerationLog.objects.filter(object_id=str(catch.pk)).count() == 2

    def test_rejection_after_sibling_approval_is_applied(self, catch):
        machine = ModerationStateMachine()
        read_before_either = Catch.objects.get(pk=catch.pk)
        photograph(machine, catch, ModerationResult(True, 0.95, "ok"))

        status = describe(machine, read_before_either, ModerationResult(False, 0.95, "spam", {"spam"}))

        catch.refresh_from_db()
        assert status == ModerationStatus.REJECTED
        assert catch.moderation_status == ModerationStatus.REJECTED
        assert catch.moderation_version == 2

    def test_review_outranks_approval(self, catch):
        machine = ModerationStateMachine()
        photograph(machine, catch, ModerationResult.pending_review("failed"))

        status = describe(machine, catch, ModerationResult(True, 0.99, "ok"))

        assert status == ModerationStatus.PENDING_REVIEW

    def test_editing_one_photo_keeps_description_rejection(self, catch):
        machine = ModerationStateMachine()
        describe(machine, catch, ModerationResult(False, 0.95, "spam", {"spam"}))
        photograph(machine, catch, ModerationResult(True, 0.95, "ok"))

        catch.photos = ["catches/b.jpg"]
        catch.save()

        catch.refresh_from_db()
        assert catch.moderation_status == ModerationStatus.REJECTED
        assert len(catch.moderation_verdicts) == 2
